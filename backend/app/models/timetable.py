from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class GeneratedTimetableRecord(Base):
    """Append-only history of generation results."""

    __tablename__ = "generated_timetables"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    department_id: Mapped[str] = mapped_column(String(36), nullable=False, default="")
    entries: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    constraints: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    conflicts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True
    )
    generated_by_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
