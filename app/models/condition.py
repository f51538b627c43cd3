from sqlalchemy import CheckConstraint, Column, Integer, String

from app.core.constants import DEFAULT_QUALITY_PERCENTAGE
from app.database.base import Base
from app.models.base import ReferenceMixin


class Condition(ReferenceMixin, Base):
    """Refurbishment grade (Neuf, Excellent, Très Bon, ...)."""

    __tablename__ = "conditions"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, index=True)
    description = Column(String(500))
    quality_percentage = Column(
        Integer,
        CheckConstraint("quality_percentage >= 0 AND quality_percentage <= 100"),
        nullable=False,
        default=DEFAULT_QUALITY_PERCENTAGE,
    )


__all__ = ["Condition"]
