"""
GovTrack API client.

Fetches how a legislator voted on roll calls tied to a bill.
API Docs: https://www.govtrack.us/developers/api
"""
from typing import Any, Dict, Iterable, List

from scorecard.config.constants import GOVTRACK, GOVTRACK_BASE_URL
from scorecard.database.normalization import (
    normalize_action,
    normalize_category,
    normalize_impact,
    parse_timestamp,
)
from scorecard.errors import InvalidEvidence
from scorecard.ingestion.base import SourceClient
from scorecard.models import LegislativeAction, Subject, TimeRange


class GovTrackClient(SourceClient):
    """Client for GovTrack vote_voter records."""

    name = GOVTRACK
    base_url = GOVTRACK_BASE_URL

    PAGE_SIZE = 300
    MAX_PAGES = 5

    def auth_headers(self) -> Dict[str, str]:
        return {"X-API-Key": self.api_key} if self.api_key else {}

    async def fetch_raw(self, subject: Subject, time_range: TimeRange) -> List[dict]:
        person_id = subject.source_id(self.name)
        votes: List[dict] = []

        for page in range(self.MAX_PAGES):
            params = {
                "person": person_id,
                "created__gte": time_range.start.isoformat(),
                "created__lte": time_range.end.isoformat(),
                "order_by": "-created",
                "limit": self.PAGE_SIZE,
                "offset": page * self.PAGE_SIZE,
            }
            data = await self._get("/vote_voter", params)
            batch = data.get("objects", [])
            votes.extend(batch)

            total = (data.get("meta") or {}).get("total_count", 0)
            if not batch or len(votes) >= total:
                break

        return votes

    def iter_items(self, payload: Any) -> Iterable[dict]:
        return payload

    def transform(self, item: dict, subject: Subject) -> LegislativeAction:
        vote = item["vote"]
        bill = vote.get("related_bill")
        if not bill:
            raise InvalidEvidence(self.name, "procedural vote without a bill", str(vote.get("id")))

        option = item.get("option") or {}
        action = normalize_action(option.get("key")) or normalize_action(option.get("value"))
        if action is None:
            raise InvalidEvidence(self.name, f"unknown vote option {option!r}", str(vote.get("id")))

        category = normalize_category(bill.get("subjects_top_term"))
        if category is None:
            raise InvalidEvidence(self.name, "bill has no recognizable subject", bill.get("display_number"))

        citations = [link for link in (vote.get("link"), bill.get("link")) if link]

        return LegislativeAction(
            id=f"{self.name}:vote-{vote['id']}",
            source=self.name,
            bill_number=bill["display_number"],
            title=bill.get("title_without_number") or bill.get("title") or bill["display_number"],
            description=vote.get("question"),
            date=parse_timestamp(vote.get("created") or item.get("created")),
            action=action,
            category=category,
            impact=normalize_impact(item.get("impact")),
            evidence=citations,
        )
