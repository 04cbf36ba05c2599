"""
Census population lookup by ZCTA (ACS 5-year, B01003_001E = total population).

Response body is a JSON table:
    [["NAME", "B01003_001E", "zip code tabulation area"],
     ["ZCTA5 10001", "21000", "10001"]]
Population is the second field of the second row.
"""

import asyncio
import logging
from typing import Any, Iterable, List, Optional

import httpx

logger = logging.getLogger(__name__)


class PopulationService:
    """
    Fetches population per ZIP. Lookups never raise: any failure degrades to None.
    fetch_all runs lookups in fixed-size batches; a batch must finish before the next starts.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        year: Optional[int] = None,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: census API key (defaults to CENSUS_API_KEY).
            year: ACS vintage, e.g. 2023.
            batch_size: max concurrent requests.
            batch_delay: seconds to pause between batches.
            timeout: per-request timeout in seconds.
            transport: optional httpx transport (tests pass httpx.MockTransport).
        """
        from config import settings
        self.api_key = api_key if api_key is not None else settings.CENSUS_API_KEY
        self.year = year or settings.CENSUS_YEAR
        self.batch_size = max(1, batch_size or settings.BATCH_SIZE)
        self.batch_delay = settings.BATCH_DELAY if batch_delay is None else batch_delay
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.url = f"{settings.CENSUS_BASE_URL}/{self.year}/acs/acs5"
        self.variable = settings.POPULATION_VARIABLE
        self.headers = {"User-Agent": settings.USER_AGENT}
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, headers=self.headers, transport=self._transport)

    def _params(self, zip_code: str) -> dict:
        params = {
            "get": f"NAME,{self.variable}",
            "for": f"zip code tabulation area:{zip_code}",
        }
        if self.api_key:
            params["key"] = self.api_key
        return params

    @staticmethod
    def parse_population(body: Any) -> Optional[int]:
        """Second field of the second row as a non-negative int, else None."""
        if not isinstance(body, list) or len(body) < 2:
            return None
        row = body[1]
        if not isinstance(row, list) or len(row) < 2:
            return None
        try:
            population = int(str(row[1]).strip())
        except (TypeError, ValueError):
            return None
        if population < 0:
            # census uses large negative sentinels for missing estimates
            return None
        return population

    async def fetch_population(self, zip_code: str, client: Optional[httpx.AsyncClient] = None) -> Optional[int]:
        """Population for one ZIP, or None on any network/HTTP/payload failure."""
        if client is None:
            async with self._client() as own_client:
                return await self.fetch_population(zip_code, client=own_client)
        try:
            resp = await client.get(self.url, params=self._params(zip_code))
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to fetch population for ZIP %s: %s", zip_code, e)
            return None
        population = self.parse_population(body)
        if population is None:
            logger.warning("No usable population for ZIP %s", zip_code)
        return population

    async def fetch_all(self, zip_codes: Iterable[str]) -> List[Optional[int]]:
        """Populations aligned with `zip_codes`."""
        zips = list(zip_codes)
        results: List[Optional[int]] = []
        n_batches = (len(zips) + self.batch_size - 1) // self.batch_size
        async with self._client() as client:
            for i in range(0, len(zips), self.batch_size):
                batch = zips[i:i + self.batch_size]
                batch_results = await asyncio.gather(
                    *(self.fetch_population(z, client=client) for z in batch)
                )
                results.extend(batch_results)
                logger.info("Processed batch %d/%d", i // self.batch_size + 1, n_batches)
                if i + self.batch_size < len(zips) and self.batch_delay > 0:
                    await asyncio.sleep(self.batch_delay)
        return results

    def fetch_all_sync(self, zip_codes: Iterable[str]) -> List[Optional[int]]:
        """Blocking wrapper for scripts and the Flask entry point."""
        return asyncio.run(self.fetch_all(zip_codes))
