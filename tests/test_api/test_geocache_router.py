"""Tests for the geocache search endpoint."""

from typing import AsyncGenerator, cast
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.types import ASGIApp

from geocache.api.v1.geocaches.router import get_query_service, parse_search_request
from geocache.api.v1.geocaches.search_service import GeocacheQueryService
from geocache.core.config import settings
from geocache.core.exceptions import (
    InputError,
    QueryExecutionError,
    StoreConnectionError,
)

SEARCH_URL = "/api/v1/geocaches/search"
TUCSON_BOX = {"minLat": 32.0, "maxLat": 32.5, "minLng": -111.0, "maxLng": -110.5}


@pytest.fixture
def mock_service() -> MagicMock:
    service = MagicMock(spec=GeocacheQueryService)
    service.search = AsyncMock(return_value=[])
    return service


@pytest_asyncio.fixture
async def mocked_client(
    test_app: FastAPI, mock_service: MagicMock
) -> AsyncGenerator[AsyncClient, None]:
    """Client whose search service is a mock."""
    test_app.dependency_overrides[get_query_service] = lambda: mock_service
    transport = ASGITransport(app=cast(ASGIApp, test_app))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestParseSearchRequest:
    """Test body parsing before validation."""

    @pytest.mark.parametrize("body", [b"", b"   ", b"[]", b"{}", b"null", b"42"])
    def test_no_usable_input(self, body: bytes):
        with pytest.raises(InputError, match="No valid input received."):
            parse_search_request(body)

    def test_invalid_json(self):
        with pytest.raises(InputError) as exc_info:
            parse_search_request(b"{not json")

        assert exc_info.value.message == "No valid input received."
        assert "not valid JSON" in (exc_info.value.detail or "")

    def test_names_invalid_fields(self):
        with pytest.raises(InputError, match="Invalid search parameters: maxLng"):
            parse_search_request(b'{"minLat": 1, "maxLat": 2, "minLng": 3}')


class TestSearchEndpoint:
    """End-to-end searches against the seeded store."""

    @pytest.mark.asyncio
    async def test_search_returns_records(self, seeded_client: AsyncClient):
        response = await seeded_client.post(
            SEARCH_URL, json={**TUCSON_BOX, "type": "", "difficulty": ""}
        )

        assert response.status_code == 200
        data = response.json()
        assert [r["id"] for r in data] == [1, 2, 3]
        assert data[0]["cache_type"] == "Traditional"
        assert data[0]["name"] == "Saguaro Stash"
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_single_record_store(
        self, test_app: FastAPI, engine_factory
    ):
        engine = await engine_factory(
            geocaches=[
                {"id": 1, "name": "Only", "latitude": 32.25, "longitude": -110.91,
                 "cache_type_id": 1, "difficulty_rating": 2}
            ],
            cache_types=[{"type_id": 1, "cache_type": "Traditional"}],
        )
        test_app.dependency_overrides[get_query_service] = (
            lambda: GeocacheQueryService(engine)
        )
        transport = ASGITransport(app=cast(ASGIApp, test_app))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(
                SEARCH_URL, json={**TUCSON_BOX, "type": "1", "difficulty": "2"}
            )
            no_match = await client.post(
                SEARCH_URL, json={**TUCSON_BOX, "difficulty": "3"}
            )

        assert response.status_code == 200
        assert response.json() == [
            {
                "id": 1,
                "name": "Only",
                "latitude": 32.25,
                "longitude": -110.91,
                "cache_type_id": 1,
                "cache_type": "Traditional",
                "difficulty_rating": 2,
            }
        ]
        assert no_match.status_code == 200
        assert no_match.json() == []

    @pytest.mark.asyncio
    async def test_text_difficulty_column(self, test_app: FastAPI, engine_factory):
        engine = await engine_factory(
            geocaches=[
                {"id": 1, "name": "Only", "latitude": 32.25, "longitude": -110.91,
                 "cache_type_id": 1, "difficulty_rating": "2"},
                {"id": 2, "name": "Gentle", "latitude": 32.30, "longitude": -110.95,
                 "cache_type_id": 1, "difficulty_rating": "Easy"},
            ],
            difficulty_type="VARCHAR(8)",
        )
        test_app.dependency_overrides[get_query_service] = (
            lambda: GeocacheQueryService(engine)
        )
        transport = ASGITransport(app=cast(ASGIApp, test_app))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            numeric = await client.post(
                SEARCH_URL, json={**TUCSON_BOX, "type": "1", "difficulty": "2"}
            )
            label = await client.post(
                SEARCH_URL, json={**TUCSON_BOX, "difficulty": "Easy"}
            )

        assert [r["id"] for r in numeric.json()] == [1]
        assert [r["difficulty_rating"] for r in label.json()] == ["Easy"]

    @pytest.mark.asyncio
    async def test_null_type_label(self, test_app: FastAPI, engine_factory):
        engine = await engine_factory(
            cache_types=[
                {"type_id": 1, "cache_type": None},
                {"type_id": 2, "cache_type": "Puzzle"},
            ]
        )
        test_app.dependency_overrides[get_query_service] = (
            lambda: GeocacheQueryService(engine)
        )
        transport = ASGITransport(app=cast(ASGIApp, test_app))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(SEARCH_URL, json=TUCSON_BOX)

        assert response.status_code == 200
        assert [r["cache_type"] for r in response.json()] == ["Puzzle"]

    @pytest.mark.asyncio
    async def test_exact_circle(self, seeded_client: AsyncClient):
        response = await seeded_client.post(
            SEARCH_URL,
            json={**TUCSON_BOX, "centerLat": 32.25, "centerLng": -110.91, "radius": 16093.4},
        )

        assert [r["id"] for r in response.json()] == [1, 2]

    @pytest.mark.asyncio
    async def test_unreachable_store(
        self, test_app: FastAPI, unreachable_engine: AsyncEngine
    ):
        test_app.dependency_overrides[get_query_service] = (
            lambda: GeocacheQueryService(unreachable_engine, connect_timeout=2.0)
        )
        transport = ASGITransport(app=cast(ASGIApp, test_app))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(SEARCH_URL, json=TUCSON_BOX)

        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "ConnectionError"
        assert data["message"] == "DB connection failed"
        assert "detail" not in data

    @pytest.mark.asyncio
    async def test_missing_table(self, test_app: FastAPI, engine_factory):
        engine = await engine_factory(with_schema=False)
        test_app.dependency_overrides[get_query_service] = (
            lambda: GeocacheQueryService(engine)
        )
        transport = ASGITransport(app=cast(ASGIApp, test_app))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(SEARCH_URL, json=TUCSON_BOX)

        assert response.status_code == 500
        assert response.json()["error"] == "QueryExecutionError"


class TestInputErrors:
    """Malformed bodies fail before the store is touched."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [b"", b"{not json", b"[1, 2]", b"{}"])
    async def test_no_valid_input(
        self, mocked_client: AsyncClient, mock_service: MagicMock, content: bytes
    ):
        response = await mocked_client.post(
            SEARCH_URL, content=content, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "InputError"
        assert data["message"] == "No valid input received."
        assert data["status_code"] == 400
        mock_service.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_field(
        self, mocked_client: AsyncClient, mock_service: MagicMock
    ):
        response = await mocked_client.post(
            SEARCH_URL, json={**TUCSON_BOX, "difficulty": ["hard"]}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid search parameters: difficulty"
        mock_service.search.assert_not_awaited()


class TestErrorKinds:
    """Error kinds stay distinguishable on the wire."""

    @pytest.mark.asyncio
    async def test_connection_error_vs_query_error(
        self, mocked_client: AsyncClient, mock_service: MagicMock
    ):
        mock_service.search.side_effect = StoreConnectionError(detail="refused")
        connection = await mocked_client.post(SEARCH_URL, json=TUCSON_BOX)

        mock_service.search.side_effect = QueryExecutionError(detail="bad column")
        query = await mocked_client.post(SEARCH_URL, json=TUCSON_BOX)

        assert (connection.status_code, connection.json()["error"]) == (
            503,
            "ConnectionError",
        )
        assert (query.status_code, query.json()["error"]) == (500, "QueryExecutionError")

    @pytest.mark.asyncio
    async def test_details_hidden_by_default(
        self, mocked_client: AsyncClient, mock_service: MagicMock
    ):
        mock_service.search.side_effect = QueryExecutionError(detail="no such column: x")

        response = await mocked_client.post(SEARCH_URL, json=TUCSON_BOX)

        assert "detail" not in response.json()
        assert "no such column" not in response.text

    @pytest.mark.asyncio
    async def test_details_exposed_when_enabled(
        self,
        mocked_client: AsyncClient,
        mock_service: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setattr(settings, "EXPOSE_ERROR_DETAILS", True)
        mock_service.search.side_effect = QueryExecutionError(detail="no such column: x")

        response = await mocked_client.post(SEARCH_URL, json=TUCSON_BOX)

        assert response.json()["detail"] == "no such column: x"

    @pytest.mark.asyncio
    async def test_search_receives_validated_request(
        self, mocked_client: AsyncClient, mock_service: MagicMock
    ):
        mock_service.search.return_value = []

        response = await mocked_client.post(
            SEARCH_URL, json={**TUCSON_BOX, "type": "Traditional", "difficulty": "2"}
        )

        assert response.status_code == 200
        request = mock_service.search.await_args.args[0]
        assert request.cache_type == "Traditional"
        assert request.difficulty == "2"
