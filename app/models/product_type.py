from sqlalchemy import Column, Integer, String

from app.database.base import Base
from app.models.base import ReferenceMixin


class ProductType(ReferenceMixin, Base):
    __tablename__ = "product_types"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500))
    icon_url = Column(String(500))
    category_color = Column(String(7))


__all__ = ["ProductType"]
