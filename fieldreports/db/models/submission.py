from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from fieldreports.db.base import Base


class FormSubmission(Base):
    __tablename__ = "dynamic_form_submissions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    form_identifier: Mapped[str] = mapped_column(String(120), index=True)

    user_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    employee_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # field id -> value, exactly as submitted
    submission_data: Mapped[dict] = mapped_column(JSON, default=dict)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
