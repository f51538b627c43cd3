from sqlalchemy import Column, Integer, String

from app.database.base import Base
from app.models.base import ReferenceMixin


class Color(ReferenceMixin, Base):
    __tablename__ = "colors"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, index=True)
    hex_code = Column(String(7))
    description = Column(String(200))


__all__ = ["Color"]
