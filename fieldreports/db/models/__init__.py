# Import all models so SQLAlchemy metadata is fully populated (tests / local bootstrap).
from fieldreports.db.models.office import Office
from fieldreports.db.models.page_configuration import PageConfiguration
from fieldreports.db.models.submission import FormSubmission
from fieldreports.db.models.user_profile import UserProfile


__all__ = [
    "Office",
    "PageConfiguration",
    "FormSubmission",
    "UserProfile",
]
