from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.constants import (
    STATUS_AVAILABLE,
    STATUS_OUT_OF_STOCK,
    STATUS_RESERVED,
    STATUS_SOLD,
)
from app.dependencies import get_current_actor, get_db
from app.models.product import Product
from app.schemas.bulk import (
    BulkOperationResult,
    BulkPriceRequest,
    BulkRequest,
    BulkStatusRequest,
    BulkStockRequest,
)
from app.schemas.common import ErrorResponse
from app.schemas.product import (
    PricingPreview,
    PricingPreviewRequest,
    ProductCreate,
    ProductListItem,
    ProductPage,
    ProductRead,
    ProductUpdate,
)
from app.schemas.stats import BrandStats, ProductStats, ProductTypeStats
from app.services import product_service
from app.services.export_service import EXPORT_MEDIA_TYPE, export_products_xlsx
from app.services.mappers import product_to_list_item, product_to_read
from app.services.pricing import compute_financials
from app.services.relation_validator import validate_relations

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


def product_filter(
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    supplier_name: Optional[str] = Query(None, alias="supplierName"),
    import_batch: Optional[str] = Query(None, alias="importBatch"),
    product_type_id: Optional[int] = Query(None, alias="productTypeId"),
    brand_id: Optional[int] = Query(None, alias="brandId"),
    model_id: Optional[int] = Query(None, alias="modelId"),
    color_id: Optional[int] = Query(None, alias="colorId"),
    condition_id: Optional[int] = Query(None, alias="conditionId"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    min_margin_percentage: Optional[Decimal] = Query(None, alias="minMarginPercentage"),
    min_stock: Optional[int] = Query(None, alias="minStock", ge=0),
    max_stock: Optional[int] = Query(None, alias="maxStock", ge=0),
    is_low_stock: Optional[bool] = Query(None, alias="isLowStock"),
    status_filter: Optional[str] = Query(None, alias="status"),
    purchase_date_from: Optional[datetime] = Query(None, alias="purchaseDateFrom"),
    purchase_date_to: Optional[datetime] = Query(None, alias="purchaseDateTo"),
    arrival_date_from: Optional[datetime] = Query(None, alias="arrivalDateFrom"),
    arrival_date_to: Optional[datetime] = Query(None, alias="arrivalDateTo"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_descending: Optional[bool] = Query(None, alias="sortDescending"),
) -> product_service.ProductFilter:
    settings = get_settings()
    page_size = min(page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    return product_service.ProductFilter(
        search_term=search_term,
        supplier_name=supplier_name,
        import_batch=import_batch,
        product_type_id=product_type_id,
        brand_id=brand_id,
        model_id=model_id,
        color_id=color_id,
        condition_id=condition_id,
        min_price=min_price,
        max_price=max_price,
        min_margin_percentage=min_margin_percentage,
        min_stock=min_stock,
        max_stock=max_stock,
        is_low_stock=is_low_stock,
        status=status_filter,
        purchase_date_from=purchase_date_from,
        purchase_date_to=purchase_date_to,
        arrival_date_from=arrival_date_from,
        arrival_date_to=arrival_date_to,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_descending=sort_descending,
    )


def _reads(products) -> List[ProductRead]:
    return [product_to_read(product) for product in products]


# ==============================
# Collection queries
# ==============================

@router.get("", response_model=List[ProductRead])
def list_products(db: Session = Depends(get_db)):
    return _reads(product_service.list_all_products(db))


@router.get("/paged", response_model=ProductPage)
def list_products_paged(
    filters: product_service.ProductFilter = Depends(product_filter),
    db: Session = Depends(get_db),
):
    result = product_service.list_products(db, filters)
    return ProductPage(
        items=[product_to_list_item(product) for product in result.items],
        total_count=result.total_count,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        has_next_page=result.has_next_page,
        has_previous_page=result.has_previous_page,
    )


@router.get("/list", response_model=List[ProductListItem])
def list_product_items(db: Session = Depends(get_db)):
    return [product_to_list_item(product) for product in product_service.list_all_products(db)]


@router.get("/search", response_model=List[ProductRead])
def search_products(query: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return _reads(product_service.search_products(db, query))


@router.get("/export")
def export_products(
    filters: product_service.ProductFilter = Depends(product_filter),
    db: Session = Depends(get_db),
):
    # same filters as /paged, every matching row
    filters.page = 1
    filters.page_size = max(product_service.count_products(db), 1)
    products = product_service.list_products(db, filters).items
    content = export_products_xlsx(products)
    filename = "products_{}.xlsx".format(datetime.now().strftime("%Y%m%d_%H%M%S"))
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


@router.get("/low-stock", response_model=List[ProductRead])
def low_stock_products(
    threshold: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    if threshold is None:
        threshold = get_settings().LOW_STOCK_THRESHOLD
    return _reads(product_service.low_stock_products(db, threshold))


@router.get("/recent-arrivals", response_model=List[ProductRead])
def recent_arrivals(
    days: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    if days is None:
        days = get_settings().RECENT_ARRIVAL_DAYS
    return _reads(product_service.recent_arrivals(db, days))


@router.get("/needing-attention", response_model=List[ProductRead])
def products_needing_attention(db: Session = Depends(get_db)):
    return _reads(product_service.products_needing_attention(db, get_settings().ATTENTION_DAYS))


@router.get("/by-type/{product_type_id}", response_model=List[ProductRead])
def products_by_type(product_type_id: int, db: Session = Depends(get_db)):
    return _reads(product_service.products_by(db, product_type_id=product_type_id))


@router.get("/by-brand/{brand_id}", response_model=List[ProductRead])
def products_by_brand(brand_id: int, db: Session = Depends(get_db)):
    return _reads(product_service.products_by(db, brand_id=brand_id))


@router.get("/by-model/{model_id}", response_model=List[ProductRead])
def products_by_model(model_id: int, db: Session = Depends(get_db)):
    return _reads(product_service.products_by(db, model_id=model_id))


@router.get("/by-color/{color_id}", response_model=List[ProductRead])
def products_by_color(color_id: int, db: Session = Depends(get_db)):
    return _reads(product_service.products_by(db, color_id=color_id))


@router.get("/by-condition/{condition_id}", response_model=List[ProductRead])
def products_by_condition(condition_id: int, db: Session = Depends(get_db)):
    return _reads(product_service.products_by(db, condition_id=condition_id))


@router.get("/by-supplier/{supplier_name}", response_model=List[ProductRead])
def products_by_supplier(supplier_name: str, db: Session = Depends(get_db)):
    return _reads(product_service.products_by(db, supplier_name=supplier_name))


@router.get("/by-batch/{import_batch}", response_model=List[ProductRead])
def products_by_batch(import_batch: str, db: Session = Depends(get_db)):
    return _reads(product_service.products_by(db, import_batch=import_batch))


@router.get("/by-status/{product_status}", response_model=List[ProductRead])
def products_by_status(product_status: str, db: Session = Depends(get_db)):
    return _reads(product_service.products_by(db, status=product_status))


@router.get("/suppliers", response_model=List[str])
def list_suppliers(db: Session = Depends(get_db)):
    return product_service.distinct_values(db, Product.supplier_name)


@router.get("/import-batches", response_model=List[str])
def list_import_batches(db: Session = Depends(get_db)):
    return product_service.distinct_values(db, Product.import_batch)


# ==============================
# Statistics and checks
# ==============================

@router.get("/stats", response_model=ProductStats)
def product_stats(db: Session = Depends(get_db)):
    return ProductStats(**product_service.product_stats(db))


@router.get("/stats/product-types", response_model=List[ProductTypeStats])
def product_type_stats(db: Session = Depends(get_db)):
    return [ProductTypeStats(**row) for row in product_service.product_type_stats(db)]


@router.get("/stats/brands", response_model=List[BrandStats])
def brand_stats(db: Session = Depends(get_db)):
    return [BrandStats(**row) for row in product_service.brand_stats(db)]


@router.get("/count")
def count_products(
    product_type_id: Optional[int] = Query(None, alias="productTypeId"),
    brand_id: Optional[int] = Query(None, alias="brandId"),
    db: Session = Depends(get_db),
):
    return {"count": product_service.count_products(db, product_type_id=product_type_id, brand_id=brand_id)}


@router.get("/exists/{product_id}")
def product_exists(product_id: int, db: Session = Depends(get_db)):
    return {"exists": product_service.product_exists(db, product_id)}


@router.get("/validate-relations")
def check_relations(
    product_type_id: int = Query(..., alias="productTypeId"),
    brand_id: int = Query(..., alias="brandId"),
    model_id: int = Query(..., alias="modelId"),
    color_id: int = Query(..., alias="colorId"),
    condition_id: int = Query(..., alias="conditionId"),
    db: Session = Depends(get_db),
):
    return {"valid": validate_relations(db, product_type_id, brand_id, model_id, color_id, condition_id)}


@router.post("/pricing/preview", response_model=PricingPreview)
def preview_pricing(payload: PricingPreviewRequest):
    financials = compute_financials(payload.purchase_price, payload.transport_cost, payload.selling_price)
    return PricingPreview(
        total_cost_price=financials.total_cost_price,
        margin=financials.margin,
        margin_percentage=financials.margin_percentage,
    )


# ==============================
# Bulk operations
# ==============================

@router.post("/bulk/stock", response_model=BulkOperationResult)
def bulk_update_stock(
    payload: BulkStockRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_service.bulk_update_stock(db, payload.product_ids, payload.stock_adjustment, actor)


@router.post("/bulk/prices", response_model=BulkOperationResult)
def bulk_update_prices(
    payload: BulkPriceRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_service.bulk_update_prices(
        db, payload.product_ids, payload.price_adjustment_percentage, actor
    )


@router.post("/bulk/status", response_model=BulkOperationResult)
def bulk_update_status(
    payload: BulkStatusRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_service.bulk_update_status(db, payload.product_ids, payload.new_status, actor)


@router.post("/bulk/delete", response_model=BulkOperationResult)
def bulk_delete(
    payload: BulkRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_service.bulk_delete(db, payload.product_ids, actor)


# ==============================
# Single product
# ==============================

@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    response: Response,
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    product = product_service.create_product(db, payload, actor)
    response.headers["Location"] = "/products/{}".format(product.id)
    return product_to_read(product)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return product_to_read(product_service.get_product(db, product_id))


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_to_read(product_service.update_product(db, product_id, payload, actor))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    product_service.delete_product(db, product_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{product_id}/stock", response_model=ProductRead)
def update_stock(
    product_id: int,
    new_stock: int = Query(..., alias="newStock", ge=0),
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_to_read(product_service.update_stock(db, product_id, new_stock, actor))


@router.patch("/{product_id}/adjust-stock", response_model=ProductRead)
def adjust_stock(
    product_id: int,
    adjustment: int = Query(...),
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_to_read(product_service.adjust_stock(db, product_id, adjustment, actor))


@router.patch("/{product_id}/price", response_model=ProductRead)
def update_selling_price(
    product_id: int,
    new_price: Decimal = Query(..., alias="newPrice", gt=0),
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_to_read(product_service.update_selling_price(db, product_id, new_price, actor))


@router.patch("/{product_id}/margin", response_model=ProductRead)
def update_margin(
    product_id: int,
    target_margin_percentage: Decimal = Query(..., alias="targetMarginPercentage", gt=-100),
    db: Session = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return product_to_read(
        product_service.update_margin_percentage(db, product_id, target_margin_percentage, actor)
    )


def _status_route(new_status):
    def mark(
        product_id: int,
        db: Session = Depends(get_db),
        actor: str = Depends(get_current_actor),
    ):
        return product_to_read(product_service.set_status(db, product_id, new_status, actor))

    return mark


for _path, _status in (
    ("mark-sold", STATUS_SOLD),
    ("mark-reserved", STATUS_RESERVED),
    ("mark-available", STATUS_AVAILABLE),
    ("mark-out-of-stock", STATUS_OUT_OF_STOCK),
):
    router.add_api_route(
        "/{product_id}/" + _path,
        _status_route(_status),
        methods=["PATCH"],
        response_model=ProductRead,
        name=_path.replace("-", "_"),
    )


__all__ = ["product_filter", "router"]
