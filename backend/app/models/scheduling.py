import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class BreakTime(Base):
    __tablename__ = "break_times"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    day: Mapped[str] = mapped_column(String(20), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now()
    )


class SchedulingPreferences(Base):
    __tablename__ = "scheduling_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    min_gap_between_classes: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    max_consecutive_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    lunch_break_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    lunch_break_start: Mapped[str] = mapped_column(String(5), nullable=False, default="13:00")
    lunch_break_end: Mapped[str] = mapped_column(String(5), nullable=False, default="14:00")
    avoid_back_to_back_same_subject: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    preferred_start_time: Mapped[str] = mapped_column(String(5), nullable=False, default="09:00")
    preferred_end_time: Mapped[str] = mapped_column(String(5), nullable=False, default="17:00")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
