from decimal import Decimal
from typing import List

from pydantic import Field

from app.schemas.common import CamelModel


class BulkRequest(CamelModel):
    product_ids: List[int] = Field(min_length=1)


class BulkStockRequest(BulkRequest):
    stock_adjustment: int


class BulkPriceRequest(BulkRequest):
    price_adjustment_percentage: Decimal = Field(gt=-100, le=1000)


class BulkStatusRequest(BulkRequest):
    new_status: str = Field(min_length=1, max_length=50)


class BulkError(CamelModel):
    product_id: int
    message: str


class BulkOperationResult(CamelModel):
    success_count: int = 0
    error_count: int = 0
    processed_ids: List[int] = []
    errors: List[BulkError] = []
