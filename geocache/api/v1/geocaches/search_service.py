"""Bounding-box search over stored geocaches."""

from typing import Any

from pydantic import ValidationError
from sqlalchemy import Float, Integer, String, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql.elements import BindParameter, TextClause

from geocache.core.db import open_connection
from geocache.core.exceptions import QueryExecutionError
from geocache.core.geo import haversine_meters
from geocache.core.logging import get_logger
from geocache.models.query import GeocacheSearchRequest, GeoPoint
from geocache.models.response import GeocacheRecord

logger = get_logger()

# Cache type labels are always resolved through the lookup table; rows
# without a label are excluded
BASE_QUERY = """
    SELECT td.*, ct.cache_type AS cache_type
    FROM test_data td
    JOIN cache_types ct ON td.cache_type_id = ct.type_id
"""


class GeocacheQueryService:
    """Build and run the single read-only geocache search statement."""

    def __init__(self, engine: AsyncEngine, connect_timeout: float | None = None):
        self.engine = engine
        self.connect_timeout = connect_timeout

    def build_query(self, request: GeocacheSearchRequest) -> TextClause:
        """
        Build the search statement for a validated request.

        Every user supplied value is attached as a typed bound parameter;
        the SQL text only ever contains placeholders.

        Returns:
            TextClause with its parameters bound
        """
        conditions = [
            "ct.cache_type IS NOT NULL",
            "td.latitude BETWEEN :min_lat AND :max_lat",
            "td.longitude BETWEEN :min_lng AND :max_lng",
        ]
        params: list[BindParameter[Any]] = [
            bindparam("min_lat", request.min_lat, type_=Float),
            bindparam("max_lat", request.max_lat, type_=Float),
            bindparam("min_lng", request.min_lng, type_=Float),
            bindparam("max_lng", request.max_lng, type_=Float),
        ]

        if isinstance(request.cache_type, int):
            conditions.append("td.cache_type_id = :cache_type_id")
            params.append(bindparam("cache_type_id", request.cache_type, type_=Integer))
        elif request.cache_type is not None:
            conditions.append("ct.cache_type = :cache_type_label")
            params.append(
                bindparam("cache_type_label", request.cache_type, type_=String)
            )

        if request.difficulty is not None:
            conditions.append("td.difficulty_rating = :difficulty")
            params.append(bindparam("difficulty", request.difficulty, type_=String))

        sql = BASE_QUERY + " WHERE " + " AND ".join(conditions) + " ORDER BY td.id"
        return text(sql).bindparams(*params)

    async def search(self, request: GeocacheSearchRequest) -> list[GeocacheRecord]:
        """
        Search geocaches inside the request's bounding box.

        Returns:
            Matching records in id order; empty when nothing matches

        Raises:
            StoreConnectionError: If no store connection could be opened
            QueryExecutionError: If the store rejects the statement or returns
                rows that do not describe a geocache
        """
        statement = self.build_query(request)

        async with open_connection(self.engine, self.connect_timeout) as connection:
            try:
                result = await connection.execute(statement)
                rows = result.mappings().all()
            except SQLAlchemyError as e:
                logger.error("geocache_query_failed", error=str(e))
                detail = str(getattr(e, "orig", None) or e)
                raise QueryExecutionError(detail=detail) from e

        try:
            records = [GeocacheRecord.model_validate(dict(row)) for row in rows]
        except ValidationError as e:
            logger.error("geocache_row_invalid", error_count=e.error_count())
            raise QueryExecutionError(
                "Geocache query returned malformed rows", detail=str(e)
            ) from e

        center = request.center
        if center is not None and request.radius_meters is not None:
            records = self.within_radius(records, center, request.radius_meters)

        logger.info(
            "geocache_search_completed",
            result_count=len(records),
            cache_type=request.cache_type,
            difficulty=request.difficulty,
        )
        return records

    @staticmethod
    def within_radius(
        records: list[GeocacheRecord], center: GeoPoint, radius_meters: float
    ) -> list[GeocacheRecord]:
        """Drop box-corner records that fall outside the true circle."""
        return [
            record
            for record in records
            if haversine_meters(
                center, GeoPoint(latitude=record.latitude, longitude=record.longitude)
            )
            <= radius_meters
        ]
