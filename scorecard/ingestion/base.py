"""
Base source client.

Every data provider follows the same path for one query: check the response
cache, claim a rate-limit slot for each HTTP request, fetch, cache the raw
payload, then normalize it into evidence records.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Union
import logging

import httpx

from scorecard.errors import InvalidEvidence, SourceUnavailable
from scorecard.ingestion.cache import ResponseCache
from scorecard.ingestion.rate_limiter import RateLimiter
from scorecard.models import CampaignPromise, LegislativeAction, Subject, TimeRange

Record = Union[LegislativeAction, CampaignPromise]


class SourceClient(ABC):
    """
    Base class for all evidence sources.

    Subclasses set `name` and `base_url`, and implement `fetch_raw`,
    `iter_items` and `transform`.
    """

    name: str = ""
    base_url: str = ""
    requires_api_key: bool = False

    def __init__(
        self,
        limiter: RateLimiter,
        cache: ResponseCache,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        base_url: Optional[str] = None,
    ):
        if self.requires_api_key and not api_key:
            raise ValueError(f"API key required for {self.name}")

        self.logger = logging.getLogger(self.__class__.__name__)
        self.limiter = limiter
        self.cache = cache
        self.api_key = api_key
        self.http_client = http_client
        self.timeout = timeout
        if base_url:
            self.base_url = base_url
        self.stats = {
            "requests": 0,
            "cache_hits": 0,
            "records": 0,
            "dropped": 0,
            "errors": 0,
            "unannotated_impact": 0,
        }

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def auth_params(self) -> Dict[str, str]:
        """Query parameters carrying credentials. Override per source."""
        return {}

    def auth_headers(self) -> Dict[str, str]:
        return {}

    async def _send(self, client: httpx.AsyncClient, url: str, params: Dict[str, Any]) -> httpx.Response:
        return await client.get(url, params=params, headers=self.auth_headers())

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> dict:
        """
        GET one endpoint of this source.

        Claims a rate-limit slot first, so every request actually sent is
        counted against the quota.

        Raises:
            RateLimited: If no slot frees up in time
            SourceUnavailable: On HTTP or decoding errors
        """
        await self.limiter.acquire(self.name)

        url = f"{self.base_url}{endpoint}"
        request_params = {**(params or {}), **self.auth_params()}
        self.stats["requests"] += 1
        self.logger.debug(f"GET {url} params={params}")

        try:
            if self.http_client is not None:
                response = await self._send(self.http_client, url, request_params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._send(client, url, request_params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            self.stats["errors"] += 1
            raise SourceUnavailable(self.name, f"HTTP {e.response.status_code} from {endpoint}") from e
        except httpx.HTTPError as e:
            self.stats["errors"] += 1
            raise SourceUnavailable(self.name, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            self.stats["errors"] += 1
            raise SourceUnavailable(self.name, f"invalid JSON from {endpoint}") from e

    # ------------------------------------------------------------------
    # Source-specific hooks
    # ------------------------------------------------------------------

    def cache_params(self, subject: Subject, time_range: TimeRange) -> Dict[str, Any]:
        """Normalized query parameters identifying one fetch."""
        return {"subject": subject.source_id(self.name), **time_range.cache_params()}

    @abstractmethod
    async def fetch_raw(self, subject: Subject, time_range: TimeRange) -> Any:
        """
        Fetch the raw payload for one subject and time range.

        The payload must be JSON-compatible; it is what gets cached.
        """
        pass

    @abstractmethod
    def iter_items(self, payload: Any) -> Iterable[dict]:
        """Split a raw payload into per-record dictionaries."""
        pass

    @abstractmethod
    def transform(self, item: dict, subject: Subject) -> Record:
        """
        Turn one raw item into an evidence record.

        Raises:
            InvalidEvidence: If the item cannot be normalized
        """
        pass

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def fetch_evidence(self, subject: Subject, time_range: TimeRange) -> List[Record]:
        """
        Evidence for `subject` within `time_range`, served from cache when fresh.

        Malformed items are dropped with a warning; the rest of the payload is
        still used. A payload that cannot be split into items is not cached.
        """
        key = ResponseCache.make_key(self.name, self.cache_params(subject, time_range))

        async with self.cache.locked(key):
            payload = self.cache.get(key)
            if payload is not None:
                self.stats["cache_hits"] += 1
                self.logger.debug(f"Cache hit for {key}")
                return self.normalize(payload, subject, time_range)

            self.logger.info(f"Fetching {self.name} evidence for {subject.id}")
            payload = await self.fetch_raw(subject, time_range)
            records = self.normalize(payload, subject, time_range)
            self.cache.put(key, payload)
            return records

    def normalize(self, payload: Any, subject: Subject, time_range: TimeRange) -> List[Record]:
        """
        Raises:
            SourceUnavailable: If the payload does not have the expected shape
        """
        try:
            items = list(self.iter_items(payload))
        except (AttributeError, KeyError, TypeError) as e:
            self.stats["errors"] += 1
            raise SourceUnavailable(self.name, f"unexpected payload shape ({type(e).__name__}: {e})") from e

        records: List[Record] = []
        unannotated = 0
        for item in items:
            try:
                record = self.transform(item, subject)
            except InvalidEvidence as e:
                self.stats["dropped"] += 1
                self.logger.warning(str(e))
                continue
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                self.stats["dropped"] += 1
                record_id = item.get("id") if isinstance(item, dict) else None
                self.logger.warning(str(InvalidEvidence(self.name, f"{type(e).__name__}: {e}", record_id)))
                continue

            if not time_range.contains(record.date):
                continue
            if isinstance(record, LegislativeAction) and not item.get("impact"):
                unannotated += 1
            records.append(record)

        if unannotated:
            self.stats["unannotated_impact"] += unannotated
            self.logger.warning(
                f"{unannotated} {self.name} records for {subject.id} carry no impact "
                f"annotation and are scored as neutral"
            )

        self.stats["records"] += len(records)
        return records
