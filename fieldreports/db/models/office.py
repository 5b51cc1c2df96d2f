from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from fieldreports.db.base import Base

class Office(Base):
    """Office roster row. Column names match the externally managed table."""

    __tablename__ = "offices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    office_name: Mapped[str | None] = mapped_column("Office name", String(200), index=True)
    region: Mapped[str | None] = mapped_column("Region", String(150), nullable=True)
    division: Mapped[str | None] = mapped_column("Division", String(150), nullable=True)
    facility_id: Mapped[str | None] = mapped_column("Facility ID", String(50), nullable=True)
    # sic: the source column name is truncated
    reporting_office_name: Mapped[str | None] = mapped_column(
        "Reporting Office Nam", String(200), nullable=True, index=True
    )
