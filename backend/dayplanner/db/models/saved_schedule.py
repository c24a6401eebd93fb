"""Saved schedule and saved task ORM models."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.orm import relationship

from dayplanner.db.base import Base
from dayplanner.db.types import JSONBCompat


class SavedSchedule(Base):
    __tablename__ = "saved_schedules"
    __table_args__ = (Index("ix_saved_schedules_date", "date"),)

    id = Column(String(64), primary_key=True)
    title = Column(Text, nullable=False)
    date = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    total_tasks = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    completed_tasks = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    # Column named "metadata" but attribute renamed to avoid Base.metadata collisions.
    metadata_json = Column("metadata", JSONBCompat, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_modified = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    tasks = relationship(
        "SavedTask",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="SavedTask.sort_order",
    )


class SavedTask(Base):
    __tablename__ = "saved_tasks"
    __table_args__ = (Index("ix_saved_tasks_schedule_id", "schedule_id"),)

    id = Column(String(96), primary_key=True)
    schedule_id = Column(String(64), ForeignKey("saved_schedules.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="", server_default=sa_text("''"))
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False, server_default=sa_text("false"))
    sort_order = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))

    schedule = relationship("SavedSchedule", back_populates="tasks")
