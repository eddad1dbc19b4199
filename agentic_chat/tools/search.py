"""
Web Search Providers.

Defines the contract for the web search backend used by SEARCH steps and a
Tavily implementation over its REST API. Callers treat any exception as
"search unavailable" and fall back to model knowledge.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..domain.models import SearchResponse, SearchResult

logger = logging.getLogger(__name__)


class SearchProvider(ABC):
    @abstractmethod
    async def search(self, query: str) -> SearchResponse:
        """
        Runs a web search and returns the normalized response.
        Raises on transport or API errors.
        """
        pass


class TavilySearchProvider(SearchProvider):
    """
    Tavily search via REST API (POST /search, basic depth, answer included).
    """

    def __init__(
        self,
        api_key: str,
        url: str = "https://api.tavily.com/search",
        max_results: int = 5,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.max_results = max_results
        self.timeout = timeout
        self.transport = transport

    async def search(self, query: str) -> SearchResponse:
        payload = {
            "api_key": self.api_key,
            "query": query,
            "search_depth": "basic",
            "max_results": self.max_results,
            "include_answer": True,
            "include_raw_content": False,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()

        results = [
            SearchResult(
                title=item.get("title") or "",
                content=item.get("content") or "",
                url=item.get("url") or "",
            )
            for item in data.get("results") or []
        ]
        logger.info(f"Tavily returned {len(results)} results for '{query}'")
        return SearchResponse(answer=data.get("answer") or None, results=results)
