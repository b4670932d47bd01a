"""MFAPI.in client for Indian mutual fund NAVs (free, no key)."""

from __future__ import annotations

import logging

import httpx

from ..cache import TTLCache
from ..errors import NoData
from ..models import MarketType, Quote, SearchResult
from .base import get_json

logger = logging.getLogger(__name__)

BASE_URL = "https://api.mfapi.in"
SCHEME_LIST_TTL = 24 * 60 * 60.0
SCHEME_LIST_KEY = "mfapi:schemes"


class MFAPIClient:
    """Quotes are keyed by AMFI scheme code.

    The full scheme list (tens of thousands of rows) is fetched once and
    kept for a day to serve searches locally.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = BASE_URL,
        cache: TTLCache | None = None,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._cache = cache or TTLCache()

    async def quote(self, scheme_code: str) -> Quote:
        payload = await get_json(self._client, f"{self._base_url}/mf/{scheme_code}", provider="MFAPI")
        if not isinstance(payload, dict):
            raise NoData(f"Unexpected MFAPI payload for scheme {scheme_code}")
        navs = payload.get("data")
        if payload.get("status") == "ERROR" or not navs:
            raise NoData(f"No NAV data for scheme {scheme_code}")

        latest = navs[0]
        previous = navs[1] if len(navs) > 1 else latest
        try:
            nav = float(latest["nav"])
            previous_nav = float(previous["nav"])
        except (KeyError, TypeError, ValueError) as exc:
            raise NoData(f"Malformed NAV for scheme {scheme_code}") from exc

        return Quote.create(
            symbol=scheme_code,
            name=(payload.get("meta") or {}).get("scheme_name") or scheme_code,
            price=nav,
            market_type=MarketType.INDIA_MF,
            change=nav - previous_nav,
            volume=0,
            high=nav,
            low=nav,
            open=nav,
            previous_close=previous_nav,
        )

    async def search(self, query: str, limit: int = 50) -> list[SearchResult]:
        needle = query.lower()
        results: list[SearchResult] = []
        for scheme in await self._schemes():
            name = str(scheme.get("schemeName") or "")
            code = str(scheme.get("schemeCode") or "")
            if needle in name.lower() or needle in code:
                results.append(
                    SearchResult(
                        symbol=code,
                        name=name,
                        market_type=MarketType.INDIA_MF,
                        currency="INR",
                        extra={"type": "Mutual Fund", "schemeCode": scheme.get("schemeCode")},
                    )
                )
                if len(results) >= limit:
                    break
        return results

    async def _schemes(self) -> list[dict]:
        schemes = self._cache.get(SCHEME_LIST_KEY)
        if schemes is None:
            schemes = await get_json(self._client, f"{self._base_url}/mf", provider="MFAPI")
            if not isinstance(schemes, list):
                raise NoData("Unexpected MFAPI scheme list format")
            self._cache.set(SCHEME_LIST_KEY, schemes, SCHEME_LIST_TTL)
            logger.info("Loaded %d mutual fund schemes from MFAPI", len(schemes))
        return schemes
