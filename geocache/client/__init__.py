"""Client side of the geocache search: criteria, HTTP client and view."""

from geocache.client.api import GeocacheClient, parse_search_response
from geocache.client.criteria import SearchCriteria
from geocache.client.view import SearchView

__all__ = ["GeocacheClient", "SearchCriteria", "SearchView", "parse_search_response"]
