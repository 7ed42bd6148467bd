"""
Audit log model.

Closing overrides and failed closing runs are written here, next to
the run they concern, so a re-closed day can always be explained.
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ledger_recon.models.base import Base


class AuditLog(Base):
    """
    One closing event. Rows are only ever inserted.

    event_type is dotted: "closing.override", "closing.failed".
    """

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    run_id: Mapped[int | None] = mapped_column(
        ForeignKey("closing_runs.id"), nullable=True
    )
    close_date: Mapped[date | None] = mapped_column(Date, index=True)
    actor: Mapped[str] = mapped_column(
        String(100), nullable=False, default="system"
    )
    details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
