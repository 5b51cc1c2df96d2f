from datetime import datetime
from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from fieldreports.db.base import Base

class PageConfiguration(Base):
    __tablename__ = "page_configurations"

    # form identifier, e.g. "leave-request"
    id: Mapped[str] = mapped_column(String(120), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), index=True)

    # office names allowed to submit/see the form; empty => unrestricted
    selected_offices: Mapped[list] = mapped_column(JSON, default=list)
    fields: Mapped[list] = mapped_column(JSON, default=list)

    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
