from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RoomUtilizationEntry(BaseModel):
    room_id: str = Field(alias="roomId")
    room_name: str = Field(alias="roomName")
    total_slots: int = Field(alias="totalSlots")
    used_slots: int = Field(alias="usedSlots")
    utilization: float

    model_config = ConfigDict(populate_by_name=True)


class TeacherWorkloadEntry(BaseModel):
    teacher_id: str = Field(alias="teacherId")
    teacher_name: str = Field(alias="teacherName")
    assigned_hours: int = Field(alias="assignedHours")
    max_hours: int = Field(alias="maxHours")
    utilization: float
    overloaded: bool

    model_config = ConfigDict(populate_by_name=True)


class OverallStatistics(BaseModel):
    total_classes: int = Field(alias="totalClasses")
    avg_class_size: int = Field(alias="avgClassSize")
    peak_day: str = Field(alias="peakDay")
    peak_time: str = Field(alias="peakTime")
    hard_conflicts: int = Field(alias="hardConflicts")
    unmet_soft_constraints: int = Field(alias="unmetSoftConstraints")

    model_config = ConfigDict(populate_by_name=True)


class TimetableStatisticsOut(BaseModel):
    timetable_id: str = Field(alias="timetableId")
    overall: OverallStatistics
    rooms: list[RoomUtilizationEntry] = Field(default_factory=list)
    teachers: list[TeacherWorkloadEntry] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
