from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from fieldreports.db.base import Base

class UserProfile(Base):
    """Staff profile keyed by employee id; used to name submitters in reports."""

    __tablename__ = "user_profile"

    employee_id: Mapped[str] = mapped_column("employeeId", String(64), primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    office_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    designation: Mapped[str | None] = mapped_column(String(150), nullable=True)
    department: Mapped[str | None] = mapped_column(String(150), nullable=True)
