"""
Congress.gov API client.

Fetches the bills a member sponsored or co-sponsored.
API Docs: https://api.congress.gov/
"""
from typing import Any, Dict, Iterable, List

from scorecard.config.constants import CONGRESS_GOV, CONGRESS_GOV_BASE_URL
from scorecard.database.normalization import (
    normalize_category,
    normalize_impact,
    parse_timestamp,
)
from scorecard.errors import InvalidEvidence
from scorecard.ingestion.base import SourceClient
from scorecard.models import ActionKind, LegislativeAction, Subject, TimeRange


class CongressGovClient(SourceClient):
    """
    Client for the Congress.gov member legislation endpoints.

    Usage:
        client = CongressGovClient(limiter, cache, api_key="...")
        records = await client.fetch_evidence(subject, time_range)
    """

    name = CONGRESS_GOV
    base_url = CONGRESS_GOV_BASE_URL
    requires_api_key = True

    PAGE_SIZE = 250
    MAX_PAGES = 4

    ROLES = {
        "sponsored": ("sponsored-legislation", "sponsoredLegislation"),
        "cosponsored": ("cosponsored-legislation", "cosponsoredLegislation"),
    }

    def auth_params(self) -> Dict[str, str]:
        return {"api_key": self.api_key}

    async def _fetch_role(self, bioguide_id: str, role: str, time_range: TimeRange) -> List[dict]:
        """
        Page through one legislation list, newest first, stopping once
        bills fall before the start of the time range.
        """
        endpoint_suffix, result_key = self.ROLES[role]
        endpoint = f"/member/{bioguide_id}/{endpoint_suffix}"
        items: List[dict] = []

        for page in range(self.MAX_PAGES):
            params = {"format": "json", "limit": self.PAGE_SIZE, "offset": page * self.PAGE_SIZE}
            data = await self._get(endpoint, params)
            batch = data.get(result_key, [])
            items.extend(batch)

            if len(batch) < self.PAGE_SIZE:
                break
            oldest = batch[-1].get("introducedDate")
            if oldest and parse_timestamp(oldest) < time_range.start:
                break

        return items

    async def fetch_raw(self, subject: Subject, time_range: TimeRange) -> Dict[str, Any]:
        bioguide_id = subject.source_id(self.name)
        return {
            role: await self._fetch_role(bioguide_id, role, time_range)
            for role in self.ROLES
        }

    def iter_items(self, payload: Dict[str, Any]) -> Iterable[dict]:
        for role in self.ROLES:
            for item in payload.get(role, []):
                yield {**item, "_role": role}

    def transform(self, item: dict, subject: Subject) -> LegislativeAction:
        bill_type = item.get("type")
        number = item.get("number")
        congress = item.get("congress")
        if not bill_type or not number:
            # Amendments have neither and are not scored
            raise InvalidEvidence(self.name, "not a bill", item.get("amendmentNumber"))

        category = normalize_category((item.get("policyArea") or {}).get("name"))
        if category is None:
            raise InvalidEvidence(self.name, "no policy area", f"{bill_type}{number}")

        action = ActionKind.SPONSORED if item["_role"] == "sponsored" else ActionKind.CO_SPONSORED
        latest_action = item.get("latestAction") or {}

        return LegislativeAction(
            id=f"{self.name}:{congress}-{bill_type.lower()}{number}-{action.value}",
            source=self.name,
            bill_number=f"{bill_type.upper()} {number}",
            title=item.get("title") or f"{bill_type.upper()} {number}",
            description=latest_action.get("text"),
            date=parse_timestamp(item["introducedDate"]),
            action=action,
            category=category,
            impact=normalize_impact(item.get("impact")),
            evidence=[item["url"]] if item.get("url") else [],
        )
