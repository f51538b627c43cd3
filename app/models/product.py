from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship

from app.core.constants import DEFAULT_MIN_STOCK_LEVEL, DEFAULT_PRODUCT_STATUS
from app.core.dates import days_since, utcnow
from app.database.base import Base
from app.models.base import AuditMixin, SoftDeleteMixin

Money = Numeric(12, 2)


class Product(AuditMixin, SoftDeleteMixin, Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(String(1000), nullable=False, default="")

    product_type_id = Column(Integer, ForeignKey("product_types.id", ondelete="RESTRICT"), nullable=False)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="RESTRICT"), nullable=False)
    model_id = Column(Integer, ForeignKey("models.id", ondelete="RESTRICT"), nullable=False)
    color_id = Column(Integer, ForeignKey("colors.id", ondelete="RESTRICT"), nullable=False)
    condition_id = Column(Integer, ForeignKey("conditions.id", ondelete="RESTRICT"), nullable=False)

    # Pricing; total_cost_price, margin and margin_percentage are derived on write
    purchase_price = Column(Money, CheckConstraint("purchase_price > 0"), nullable=False)
    transport_cost = Column(Money, CheckConstraint("transport_cost >= 0"), nullable=False, default=0)
    total_cost_price = Column(Money, nullable=False, default=0)
    selling_price = Column(Money, CheckConstraint("selling_price > 0"), nullable=False)
    margin = Column(Money, nullable=False, default=0)
    margin_percentage = Column(Numeric(9, 2), nullable=False, default=0)

    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=DEFAULT_MIN_STOCK_LEVEL)

    storage = Column(String(50))
    memory = Column(String(50))
    processor = Column(String(150))
    screen_size = Column(String(20))

    supplier_name = Column(String(200), nullable=False)
    supplier_city = Column(String(100))
    purchase_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    arrival_date = Column(DateTime(timezone=True))
    import_batch = Column(String(50), nullable=False, index=True)
    invoice_number = Column(String(100), nullable=False)

    status = Column(String(50), nullable=False, default=DEFAULT_PRODUCT_STATUS, index=True)

    notes = Column(String(500))
    warranty_info = Column(String(300))
    image_url = Column(String(500))
    images_urls = Column(Text)
    documents_urls = Column(Text)

    product_type = relationship("ProductType", lazy="joined")
    brand = relationship("Brand", lazy="joined")
    model = relationship("Model", lazy="joined")
    color = relationship("Color", lazy="joined")
    condition = relationship("Condition", lazy="joined")

    __table_args__ = (
        Index("idx_products_type_brand", "product_type_id", "brand_id"),
        Index("idx_products_supplier", "supplier_name"),
    )

    @hybrid_property
    def is_low_stock(self):
        return self.stock <= self.min_stock_level

    @property
    def total_value(self):
        return (self.stock or 0) * (self.selling_price or 0)

    @property
    def days_in_stock(self):
        # arrival date when known, otherwise the day the row was created
        return days_since(self.arrival_date or self.created_at) or 0

    def __repr__(self) -> str:
        return "<Product(id={}, name='{}')>".format(self.id, self.name)


__all__ = ["Product"]
