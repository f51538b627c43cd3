from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel, Money


class ProductWriteFields(CamelModel):
    storage: Optional[str] = Field(None, max_length=50)
    memory: Optional[str] = Field(None, max_length=50)
    processor: Optional[str] = Field(None, max_length=150)
    screen_size: Optional[str] = Field(None, max_length=20)

    supplier_city: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[datetime] = None
    arrival_date: Optional[datetime] = None

    notes: Optional[str] = Field(None, max_length=500)
    warranty_info: Optional[str] = Field(None, max_length=300)
    image_url: Optional[str] = Field(None, max_length=500)
    images_urls: Optional[str] = Field(None, max_length=2000)
    documents_urls: Optional[str] = Field(None, max_length=2000)


class ProductCreate(ProductWriteFields):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=1000)

    product_type_id: int = Field(gt=0)
    brand_id: int = Field(gt=0)
    model_id: int = Field(gt=0)
    color_id: int = Field(gt=0)
    condition_id: int = Field(gt=0)

    purchase_price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    transport_cost: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    selling_price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)

    stock: int = Field(0, ge=0)
    min_stock_level: int = Field(5, ge=0)

    supplier_name: str = Field(min_length=1, max_length=200)
    import_batch: str = Field(min_length=1, max_length=50)
    invoice_number: str = Field(min_length=1, max_length=100)

    status: Optional[str] = Field(None, min_length=1, max_length=50)


class ProductUpdate(ProductWriteFields):
    """Partial update: absent or null fields keep their stored value."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)

    product_type_id: Optional[int] = Field(None, gt=0)
    brand_id: Optional[int] = Field(None, gt=0)
    model_id: Optional[int] = Field(None, gt=0)
    color_id: Optional[int] = Field(None, gt=0)
    condition_id: Optional[int] = Field(None, gt=0)

    purchase_price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    transport_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    selling_price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)

    stock: Optional[int] = Field(None, ge=0)
    min_stock_level: Optional[int] = Field(None, ge=0)

    supplier_name: Optional[str] = Field(None, min_length=1, max_length=200)
    import_batch: Optional[str] = Field(None, min_length=1, max_length=50)
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=100)

    status: Optional[str] = Field(None, min_length=1, max_length=50)


class ProductRead(CamelModel):
    id: int
    name: str
    description: str

    product_type_id: int
    brand_id: int
    model_id: int
    color_id: int
    condition_id: int

    product_type_name: str = ""
    brand_name: str = ""
    model_name: str = ""
    color_name: str = ""
    color_hex_code: Optional[str] = None
    condition_name: str = ""
    condition_quality_percentage: int = 0

    purchase_price: Money
    transport_cost: Money
    total_cost_price: Money
    selling_price: Money
    margin: Money
    margin_percentage: Money

    stock: int
    min_stock_level: int

    storage: Optional[str] = None
    memory: Optional[str] = None
    processor: Optional[str] = None
    screen_size: Optional[str] = None

    supplier_name: str
    supplier_city: Optional[str] = None
    purchase_date: datetime
    arrival_date: Optional[datetime] = None
    import_batch: str
    invoice_number: str

    status: str
    is_active: bool = True

    notes: Optional[str] = None
    warranty_info: Optional[str] = None
    image_url: Optional[str] = None
    images_urls: Optional[str] = None
    documents_urls: Optional[str] = None

    created_at: datetime
    created_by: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    total_value: Money
    is_low_stock: bool
    days_in_stock: int


class ProductListItem(CamelModel):
    id: int
    name: str
    product_type_name: str = ""
    brand_name: str = ""
    model_name: str = ""
    color_name: str = ""
    color_hex_code: Optional[str] = None
    condition_name: str = ""
    selling_price: Money
    purchase_price: Money
    margin_percentage: Money
    stock: int
    is_low_stock: bool
    status: str
    image_url: Optional[str] = None
    created_at: datetime


class ProductPage(CamelModel):
    items: List[ProductListItem]
    total_count: int
    page: int
    page_size: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class PricingPreviewRequest(CamelModel):
    purchase_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    transport_cost: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    selling_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class PricingPreview(CamelModel):
    total_cost_price: Money
    margin: Money
    margin_percentage: Money
