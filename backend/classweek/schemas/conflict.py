from pydantic import BaseModel, Field
from typing import List

class ConflictCheckResult(BaseModel):
    has_conflict: bool = Field(alias="hasConflict")
    conflicting_ids: List[str] = Field(default_factory=list, alias="conflictingIds")

    model_config = {
        "populate_by_name": True,
    }

class ConflictDetail(BaseModel):
    id: str
    day_of_week: int = Field(alias="dayOfWeek")
    description: str
    affected_sessions: List[str] = Field(alias="affectedSessions")  # Session ids involved

    model_config = {
        "populate_by_name": True,
    }

class ConflictReport(BaseModel):
    conflicts: List[ConflictDetail] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)
