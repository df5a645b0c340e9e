"""
Survey models - records, list filters, pages and statistics.

SurveyRecord is what gets persisted. The remaining classes describe the
query side: what a caller may ask for (ListFilter) and what comes back
(SurveyPage, SurveyStats and their HTTP response bodies).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


RESPONSES_NAMESPACE = "responses"


class SurveyAnswers(BaseModel):
    """
    The two free-text onboarding answers.

    Missing or null fields become empty strings; unknown fields are dropped.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    teachLLMs: str = Field(default="", description="How the participant would teach LLMs")
    syntheticStudents: str = Field(default="", description="Thoughts on synthetic students")

    @field_validator("teachLLMs", "syntheticStudents", mode="before")
    @classmethod
    def _empty_when_missing(cls, value: Any) -> Any:
        return "" if value is None else value


class SurveyRecord(BaseModel):
    """
    One immutable survey submission.

    ``answers`` travels under the wire name ``responses``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    timestamp: int = Field(..., description="Server-assigned milliseconds since epoch")
    answers: SurveyAnswers = Field(..., alias="responses")

    @property
    def key(self) -> Tuple[str, int, str]:
        """The store key, always derived from the record itself."""
        return (RESPONSES_NAMESPACE, self.timestamp, self.name)

    def to_store_value(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_store_value(cls, value: Dict[str, Any]) -> "SurveyRecord":
        return cls.model_validate(value)


class ListFilter(BaseModel):
    """
    Filter for listing responses.

    offset and limit apply to the records that pass ``since`` and
    ``name``, not to the raw store.
    """
    model_config = ConfigDict(frozen=True)

    limit: int = Field(default=100, ge=0)
    offset: int = Field(default=0, ge=0)
    since: int = Field(default=0, ge=0, description="Minimum timestamp, inclusive")
    name: Optional[str] = None

    def matches(self, record: SurveyRecord) -> bool:
        if record.timestamp < self.since:
            return False
        if self.name is not None and record.name != self.name:
            return False
        return True


@dataclass
class SurveyEntry:
    """A stored record together with its raw store key."""
    key: Tuple[str, int, str]
    record: SurveyRecord

    def to_dict(self) -> Dict[str, Any]:
        item = self.record.to_store_value()
        item["key"] = list(self.key)
        return item


@dataclass
class SurveyPage:
    """Result of a list query."""
    filter: ListFilter
    entries: List[SurveyEntry] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "responses": [entry.to_dict() for entry in self.entries],
            "metadata": {
                "limit": self.filter.limit,
                "offset": self.filter.offset,
                "count": self.count,
                "filters": {
                    "since": self.filter.since,
                    "name": self.filter.name,
                },
            },
        }


@dataclass
class SurveyStats:
    """Aggregates over every stored record. first/last are None when empty."""
    total: int = 0
    unique_participants: int = 0
    first: Optional[int] = None
    last: Optional[int] = None

    @property
    def duration_ms(self) -> Optional[int]:
        if self.first is None or self.last is None:
            return None
        return self.last - self.first

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "uniqueParticipants": self.unique_participants,
            "timeRange": {
                "first": self.first,
                "last": self.last,
                "durationMs": self.duration_ms,
            },
        }
