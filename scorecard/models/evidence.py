"""
Evidence data models.

Evidence is a tagged union of two record kinds: legislative actions and
campaign promises. Both carry one of ten policy categories and the name of
the source that reported them.
"""
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from scorecard.database.normalization import as_utc, normalize_bill_number


class Category(str, Enum):
    """Policy category (closed set)."""
    ECONOMIC = "economic"
    SOCIAL_WELFARE = "social_welfare"
    ENVIRONMENTAL = "environmental"
    SECURITY = "security"
    CIVIL_RIGHTS = "civil_rights"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    INFRASTRUCTURE = "infrastructure"
    FOREIGN_POLICY = "foreign_policy"
    TRANSPARENCY = "transparency"


class ActionKind(str, Enum):
    """What the official did with a bill."""
    SPONSORED = "sponsored"
    CO_SPONSORED = "co-sponsored"
    VOTED_FOR = "voted_for"
    VOTED_AGAINST = "voted_against"
    ABSTAINED = "abstained"


class Impact(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class PromiseStatus(str, Enum):
    FULFILLED = "fulfilled"
    PARTIALLY_FULFILLED = "partially_fulfilled"
    BROKEN = "broken"
    PENDING = "pending"


class LegislativeAction(BaseModel):
    """
    A sponsorship or vote on a bill.

    `evidence` holds citation URLs; records with more citations win when the
    same action is reported by several sources.
    """
    kind: Literal["legislative_action"] = "legislative_action"

    id: str
    source: str
    bill_number: str  # e.g. "H.R. 1234"
    title: str
    description: Optional[str] = None
    date: datetime
    action: ActionKind
    category: Category
    impact: Impact = Impact.NEUTRAL
    evidence: List[str] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def _utc_date(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def natural_key(self) -> tuple:
        """Identity of the action independent of the reporting source."""
        return ("legislative_action", normalize_bill_number(self.bill_number), self.action.value, self.date.date().isoformat())


class CampaignPromise(BaseModel):
    """A campaign promise and how far it has been kept."""
    kind: Literal["campaign_promise"] = "campaign_promise"

    id: str
    source: str
    promise: str
    category: Category
    citation: str  # where the promise was made
    date: datetime
    status: PromiseStatus
    related_legislation: List[str] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def _utc_date(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def evidence(self) -> List[str]:
        return [self.citation]

    @property
    def natural_key(self) -> tuple:
        return ("campaign_promise", self.id)


EvidenceRecord = Annotated[
    Union[LegislativeAction, CampaignPromise],
    Field(discriminator="kind"),
]


def citation_count(record: Union[LegislativeAction, CampaignPromise]) -> int:
    if isinstance(record, LegislativeAction):
        return len(record.evidence)
    if isinstance(record, CampaignPromise):
        return len(record.related_legislation) + 1
    raise TypeError(f"Unsupported evidence record: {type(record).__name__}")


class EvidenceSet(BaseModel):
    """
    Merged evidence for one subject, plus which sources answered.

    Records are sorted by (date, natural key) so the set is identical no
    matter in which order sources complete.
    """
    legislative_actions: List[LegislativeAction] = Field(default_factory=list)
    campaign_promises: List[CampaignPromise] = Field(default_factory=list)
    sources_queried: List[str] = Field(default_factory=list)
    unavailable_sources: List[str] = Field(default_factory=list)

    @property
    def records(self) -> List[Union[LegislativeAction, CampaignPromise]]:
        return [*self.legislative_actions, *self.campaign_promises]

    def __len__(self) -> int:
        return len(self.legislative_actions) + len(self.campaign_promises)
