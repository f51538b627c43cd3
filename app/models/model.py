from sqlalchemy import Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.database.base import Base
from app.models.base import ReferenceMixin


class Model(ReferenceMixin, Base):
    """A device model (Galaxy S24, iPhone 15, XPS 13) under one brand."""

    __tablename__ = "models"

    id = Column(Integer, primary_key=True)
    name = Column(String(150), nullable=False)
    description = Column(String(1000))
    model_reference = Column(String(50))
    release_year = Column(Integer)

    product_type_id = Column(
        Integer,
        ForeignKey("product_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    brand_id = Column(
        Integer,
        ForeignKey("brands.id", ondelete="RESTRICT"),
        nullable=False,
    )

    product_type = relationship("ProductType", lazy="joined")
    brand = relationship("Brand", lazy="joined")

    __table_args__ = (
        Index("idx_models_brand_name", "brand_id", "name"),
        Index("idx_models_type", "product_type_id"),
    )


__all__ = ["Model"]
