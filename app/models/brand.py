from sqlalchemy import Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.database.base import Base
from app.models.base import ReferenceMixin


class Brand(ReferenceMixin, Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500))
    logo_url = Column(String(500))
    website = Column(String(200))

    product_type_id = Column(
        Integer,
        ForeignKey("product_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    product_type = relationship("ProductType", lazy="joined")

    __table_args__ = (
        Index("idx_brands_type_name", "product_type_id", "name"),
    )


__all__ = ["Brand"]
