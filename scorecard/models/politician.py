"""
Subject data models.

Defines the official being evaluated and the time range of an evaluation.
"""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from scorecard.config.constants import DEFAULT_EVALUATION_DAYS
from scorecard.database.normalization import as_utc, normalize_party, normalize_state


class Party(str, Enum):
    """Political party affiliation."""
    DEMOCRAT = "D"
    REPUBLICAN = "R"
    INDEPENDENT = "I"
    LIBERTARIAN = "L"
    GREEN = "G"


class Subject(BaseModel):
    """
    A public official under evaluation.

    Immutable input to one evaluation. `id` is the bioguide id, which is also
    the identifier used for any source missing from `external_ids`.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Bioguide ID or other stable identifier")
    name: str
    party: Party
    state: str = Field(..., min_length=2, max_length=2, description="Two-letter state code")
    position: str  # "Senator", "Representative", ...
    start_date: datetime
    end_date: Optional[datetime] = None

    # Per-source identifiers, e.g. {"govtrack.us": "412549"}
    external_ids: Dict[str, str] = Field(default_factory=dict)

    @field_validator("party", mode="before")
    @classmethod
    def _normalize_party(cls, value):
        if isinstance(value, Party):
            return value
        return normalize_party(value)

    @field_validator("state", mode="before")
    @classmethod
    def _normalize_state(cls, value):
        code = normalize_state(value)
        if code is None:
            raise ValueError(f"Unknown state: {value}")
        return code

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    def source_id(self, source: str) -> str:
        """Identifier to use when querying `source`."""
        return self.external_ids.get(source, self.id)

    def __str__(self) -> str:
        return f"{self.position} {self.name} ({self.party.value}-{self.state})"


class TimeRange(BaseModel):
    """Closed interval [start, end] of UTC timestamps."""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _ordered(self) -> "TimeRange":
        if self.start > self.end:
            raise ValueError("TimeRange start must not be after end")
        return self

    @classmethod
    def last_days(cls, days: int = DEFAULT_EVALUATION_DAYS, now: Optional[datetime] = None) -> "TimeRange":
        """
        The `days` days up to the end of the current UTC day.

        Snapped to a day boundary so that repeated calls on the same day
        produce the same range and share cache entries.
        """
        moment = as_utc(now) if now is not None else datetime.now(timezone.utc)
        end = moment.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
        return cls(start=end - timedelta(days=days), end=end)

    @property
    def span_seconds(self) -> float:
        return (self.end - self.start).total_seconds()

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_utc(moment) <= self.end

    def cache_params(self) -> dict:
        """Normalized representation used in cache keys."""
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}
