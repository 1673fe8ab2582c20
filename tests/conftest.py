"""Shared fixtures for the scorecard test suite."""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional

import pytest
from pydantic import TypeAdapter

from scorecard.config.settings import Settings
from scorecard.ingestion import RateLimiter, ResponseCache, SourceClient
from scorecard.models import EvidenceRecord, Subject, TimeRange

RANGE_END = datetime(2024, 12, 31, tzinfo=timezone.utc)
RANGE_START = RANGE_END - timedelta(days=365)

_record_adapter = TypeAdapter(EvidenceRecord)


class FakeClock:
    """Manual clock whose sleep advances time instead of waiting."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.now += seconds
        await asyncio.sleep(0)


class FakeSource(SourceClient):
    """
    In-memory source serving canned record dicts.

    `fail_for` lists subject ids for which the fetch raises `error`.
    """

    def __init__(
        self,
        limiter: RateLimiter,
        cache: ResponseCache,
        name: str = "fake",
        items: Optional[Iterable[dict]] = None,
        error: Optional[Exception] = None,
        fail_for: Iterable[str] = (),
        delay: float = 0.0,
    ):
        self.name = name
        super().__init__(limiter=limiter, cache=cache)
        self.items = list(items or [])
        self.error = error
        self.fail_for = set(fail_for)
        self.delay = delay
        self.calls = 0

    async def fetch_raw(self, subject: Subject, time_range: TimeRange) -> Any:
        self.calls += 1
        await self.limiter.acquire(self.name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None and (not self.fail_for or subject.id in self.fail_for):
            raise self.error
        return {"items": [dict(item) for item in self.items]}

    def iter_items(self, payload: Any) -> Iterable[dict]:
        return payload["items"]

    def transform(self, item: dict, subject: Subject):
        return _record_adapter.validate_python({**item, "source": self.name})


def action(
    bill: str = "H.R. 1",
    category: str = "healthcare",
    action: str = "sponsored",
    impact: str = "positive",
    date: Optional[datetime] = None,
    evidence: Optional[List[str]] = None,
    record_id: Optional[str] = None,
) -> dict:
    date = date or RANGE_END - timedelta(days=30)
    return {
        "kind": "legislative_action",
        "id": record_id or f"{bill}-{action}-{date.date()}",
        "bill_number": bill,
        "title": f"Title of {bill}",
        "date": date,
        "action": action,
        "category": category,
        "impact": impact,
        "evidence": evidence if evidence is not None else [f"https://example.org/{bill}"],
    }


def promise(
    promise_id: str = "p1",
    category: str = "education",
    status: str = "fulfilled",
    date: Optional[datetime] = None,
) -> dict:
    return {
        "kind": "campaign_promise",
        "id": promise_id,
        "promise": f"Promise {promise_id}",
        "category": category,
        "citation": f"https://example.org/promises/{promise_id}",
        "date": date or RANGE_END - timedelta(days=60),
        "status": status,
        "related_legislation": [],
    }


def make_records(items: Iterable[dict], source: str = "fake") -> list:
    return [_record_adapter.validate_python({**item, "source": source}) for item in items]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        CONGRESS_GOV_API_KEY="congress-key",
        PROMISE_TRACKER_API_KEY="promise-key",
        RETRY_BACKOFF_SECONDS=0.0,
        RATE_LIMIT_WAIT_TIMEOUT_SECONDS=1.0,
        MONGODB_URI=None,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock) -> RateLimiter:
    return RateLimiter({"fake": 1000, "fake-a": 1000, "fake-b": 1000}, clock=clock, sleep=clock.sleep)


@pytest.fixture
def cache(clock) -> ResponseCache:
    return ResponseCache(ttl_seconds=24 * 3600, clock=clock)


@pytest.fixture
def subject() -> Subject:
    return Subject(
        id="D000001",
        name="Jane Doe",
        party="Democratic",
        state="California",
        position="Senator",
        start_date=datetime(2021, 1, 3, tzinfo=timezone.utc),
    )


@pytest.fixture
def other_subject() -> Subject:
    return Subject(
        id="R000002",
        name="John Roe",
        party="R",
        state="UT",
        position="Representative",
        start_date=datetime(2019, 1, 3, tzinfo=timezone.utc),
    )


@pytest.fixture
def time_range() -> TimeRange:
    return TimeRange(start=RANGE_START, end=RANGE_END)
