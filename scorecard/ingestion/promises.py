"""
Campaign promise tracker client.

Promises come with a fulfillment rating and, where known, the bills that
acted on them.
"""
from typing import Any, Dict, Iterable

from scorecard.config.constants import PROMISE_TRACKER, PROMISE_TRACKER_BASE_URL
from scorecard.database.normalization import (
    normalize_category,
    normalize_promise_status,
    parse_timestamp,
)
from scorecard.errors import InvalidEvidence
from scorecard.ingestion.base import SourceClient
from scorecard.models import CampaignPromise, Subject, TimeRange


class PromiseTrackerClient(SourceClient):

    name = PROMISE_TRACKER
    base_url = PROMISE_TRACKER_BASE_URL
    requires_api_key = True

    def auth_headers(self) -> Dict[str, str]:
        return {"X-API-Key": self.api_key}

    async def fetch_raw(self, subject: Subject, time_range: TimeRange) -> Dict[str, Any]:
        params = {
            "since": time_range.start.date().isoformat(),
            "until": time_range.end.date().isoformat(),
        }
        return await self._get(f"/officials/{subject.source_id(self.name)}/promises", params)

    def iter_items(self, payload: Dict[str, Any]) -> Iterable[dict]:
        return payload.get("promises", [])

    def transform(self, item: dict, subject: Subject) -> CampaignPromise:
        promise_id = str(item["id"])

        status = normalize_promise_status(item.get("status"))
        if status is None:
            raise InvalidEvidence(self.name, f"unknown status {item.get('status')!r}", promise_id)

        category = normalize_category(item.get("category"))
        if category is None:
            raise InvalidEvidence(self.name, f"unknown category {item.get('category')!r}", promise_id)

        citation = item.get("sourceUrl") or item.get("source")
        if not citation:
            raise InvalidEvidence(self.name, "promise has no source citation", promise_id)

        return CampaignPromise(
            id=f"{self.name}:{promise_id}",
            source=self.name,
            promise=item.get("promise") or item["title"],
            category=category,
            citation=citation,
            date=parse_timestamp(item["date"]),
            status=status,
            related_legislation=list(item.get("relatedLegislation") or []),
        )
