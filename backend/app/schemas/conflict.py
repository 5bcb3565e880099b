from pydantic import BaseModel
from typing import Literal, Optional, List

class ConflictDetail(BaseModel):
    id: str
    conflict_type: Literal[
        "teacher_conflict",
        "room_conflict",
        "section_conflict",
        "availability_conflict",
        "break_conflict",
    ]
    severity: Literal["high", "medium", "low"]
    description: str
    affected_entries: List[str]  # timetable entry ids involved
    suggestion: Optional[str] = None

class ConflictReport(BaseModel):
    timetable_id: str
    conflicts: List[ConflictDetail]

    @property
    def high_severity_count(self) -> int:
        return sum(1 for item in self.conflicts if item.severity == "high")
