from app.schemas.common import CamelModel, Money


class ProductStats(CamelModel):
    total_products: int
    active_products: int
    low_stock_products: int
    total_stock_value: Money
    total_margin: Money
    average_margin_percentage: Money
    total_product_types: int
    total_brands: int
    total_models: int


class ProductTypeStats(CamelModel):
    product_type_id: int
    product_type_name: str
    product_count: int
    total_value: Money
    average_price: Money
    low_stock_count: int


class BrandStats(CamelModel):
    brand_id: int
    brand_name: str
    product_type_name: str
    product_count: int
    total_value: Money
    average_margin_percentage: Money
