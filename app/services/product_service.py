import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional

from sqlalchemy import func, or_, select

from app.core.constants import (
    DEFAULT_PRODUCT_SORT,
    DEFAULT_PRODUCT_STATUS,
    PRODUCT_SORT_FIELDS,
    PRODUCT_STATUSES,
    ZERO,
)
from app.core.dates import as_utc, utcnow
from app.core.errors import DomainError, NotFoundError, ValidationError
from app.database.session import commit_or_raise
from app.models.brand import Brand
from app.models.color import Color
from app.models.condition import Condition
from app.models.model import Model
from app.models.product import Product
from app.models.product_type import ProductType
from app.schemas.bulk import BulkError, BulkOperationResult
from app.services.pricing import (
    adjust_price_by_percentage,
    apply_financials,
    selling_price_for_margin,
    to_money,
)
from app.services.relation_validator import find_relation_errors

logger = logging.getLogger(__name__)

_RELATION_FIELDS = ("product_type_id", "brand_id", "model_id", "color_id", "condition_id")
_PRICE_FIELDS = ("purchase_price", "transport_cost", "selling_price")
_DATE_FIELDS = ("purchase_date", "arrival_date")

_SORT_COLUMNS = {
    "name": Product.name,
    "sellingPrice": Product.selling_price,
    "purchasePrice": Product.purchase_price,
    "marginPercentage": Product.margin_percentage,
    "stock": Product.stock,
    "createdAt": Product.created_at,
    "purchaseDate": Product.purchase_date,
    "arrivalDate": Product.arrival_date,
}


@dataclass
class ProductFilter:
    search_term: Optional[str] = None
    supplier_name: Optional[str] = None
    import_batch: Optional[str] = None
    product_type_id: Optional[int] = None
    brand_id: Optional[int] = None
    model_id: Optional[int] = None
    color_id: Optional[int] = None
    condition_id: Optional[int] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_margin_percentage: Optional[Decimal] = None
    min_stock: Optional[int] = None
    max_stock: Optional[int] = None
    is_low_stock: Optional[bool] = None
    status: Optional[str] = None
    purchase_date_from: Optional[datetime] = None
    purchase_date_to: Optional[datetime] = None
    arrival_date_from: Optional[datetime] = None
    arrival_date_to: Optional[datetime] = None
    page: int = 1
    page_size: int = 20
    sort_by: Optional[str] = None
    sort_descending: Optional[bool] = None


@dataclass
class ProductPageResult:
    items: list
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self):
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_next_page(self):
        return self.page < self.total_pages

    @property
    def has_previous_page(self):
        return self.page > 1


def _active():
    return select(Product).where(Product.is_deleted.is_(False))


def _all(db, stmt):
    return list(db.execute(stmt).scalars().unique().all())


def _normalize_status(value):
    value = (value or "").strip()
    for known in PRODUCT_STATUSES:
        if known.lower() == value.lower():
            return known
    return value


def _contains(column, term):
    """Case-insensitive substring match; % and _ in the term are literal."""
    escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike("%{}%".format(escaped), escape="\\")


def _text_match(term):
    return or_(
        _contains(Product.name, term),
        _contains(Product.description, term),
        Product.product_type.has(_contains(ProductType.name, term)),
        Product.brand.has(_contains(Brand.name, term)),
        Product.model.has(_contains(Model.name, term)),
        Product.color.has(_contains(Color.name, term)),
        Product.condition.has(_contains(Condition.name, term)),
    )


# ==============================
# Lookups
# ==============================

def find_product(db, product_id) -> Optional[Product]:
    """Non-deleted product by id, references eagerly loaded, or None."""
    product = db.get(Product, product_id)
    if product is None or product.is_deleted:
        return None
    return product


def get_product(db, product_id) -> Product:
    product = find_product(db, product_id)
    if product is None:
        logger.warning("Product %s not found or deleted", product_id)
        raise NotFoundError("Product", product_id)
    return product


def product_exists(db, product_id) -> bool:
    return find_product(db, product_id) is not None


def list_all_products(db):
    return _all(db, _active().order_by(Product.created_at.desc(), Product.id.desc()))


def count_products(db, product_type_id=None, brand_id=None) -> int:
    stmt = select(func.count(Product.id)).where(Product.is_deleted.is_(False))
    if product_type_id is not None:
        stmt = stmt.where(Product.product_type_id == product_type_id)
    if brand_id is not None:
        stmt = stmt.where(Product.brand_id == brand_id)
    return int(db.execute(stmt).scalar_one())


def search_products(db, query):
    query = (query or "").strip()
    if not query:
        raise ValidationError.for_field("query", "Search term must not be empty.")
    stmt = _active().where(_text_match(query)).order_by(Product.name, Product.id)
    return _all(db, stmt)


def products_by(db, **criteria):
    """Exact-match lookup on one of the product's reference ids or labels."""
    stmt = _active()
    for field, value in criteria.items():
        if value is None:
            continue
        if field == "status":
            stmt = stmt.where(func.lower(Product.status) == value.strip().lower())
        elif field == "supplier_name":
            stmt = stmt.where(_contains(Product.supplier_name, value))
        else:
            stmt = stmt.where(getattr(Product, field) == value)
    return _all(db, stmt.order_by(Product.name, Product.id))


def low_stock_products(db, threshold):
    stmt = _active().where(Product.stock <= threshold).order_by(Product.stock, Product.name)
    return _all(db, stmt)


def recent_arrivals(db, days):
    cutoff = utcnow() - timedelta(days=days)
    stmt = (
        _active()
        .where(Product.arrival_date.is_not(None), Product.arrival_date >= cutoff)
        .order_by(Product.arrival_date.desc())
    )
    return _all(db, stmt)


def products_needing_attention(db, attention_days):
    return [
        product
        for product in list_all_products(db)
        if product.is_low_stock or product.days_in_stock > attention_days
    ]


def distinct_values(db, column):
    stmt = (
        select(column)
        .where(Product.is_deleted.is_(False), column.is_not(None), column != "")
        .distinct()
        .order_by(column)
    )
    return [value for value in db.execute(stmt).scalars().all()]


def list_products(db, filters: ProductFilter) -> ProductPageResult:
    if filters.sort_by and filters.sort_by not in _SORT_COLUMNS:
        raise ValidationError.for_field(
            "sortBy", "Sort field must be one of: {}.".format(", ".join(PRODUCT_SORT_FIELDS))
        )

    stmt = _active()

    if filters.search_term and filters.search_term.strip():
        stmt = stmt.where(_text_match(filters.search_term))
    if filters.supplier_name:
        stmt = stmt.where(_contains(Product.supplier_name, filters.supplier_name))
    if filters.import_batch:
        stmt = stmt.where(Product.import_batch == filters.import_batch.strip())
    for field in _RELATION_FIELDS:
        value = getattr(filters, field)
        if value is not None:
            stmt = stmt.where(getattr(Product, field) == value)
    if filters.min_price is not None:
        stmt = stmt.where(Product.selling_price >= filters.min_price)
    if filters.max_price is not None:
        stmt = stmt.where(Product.selling_price <= filters.max_price)
    if filters.min_margin_percentage is not None:
        stmt = stmt.where(Product.margin_percentage >= filters.min_margin_percentage)
    if filters.min_stock is not None:
        stmt = stmt.where(Product.stock >= filters.min_stock)
    if filters.max_stock is not None:
        stmt = stmt.where(Product.stock <= filters.max_stock)
    if filters.is_low_stock is True:
        stmt = stmt.where(Product.is_low_stock)
    elif filters.is_low_stock is False:
        stmt = stmt.where(Product.stock > Product.min_stock_level)
    if filters.status:
        stmt = stmt.where(func.lower(Product.status) == filters.status.strip().lower())
    if filters.purchase_date_from is not None:
        stmt = stmt.where(Product.purchase_date >= as_utc(filters.purchase_date_from))
    if filters.purchase_date_to is not None:
        stmt = stmt.where(Product.purchase_date <= as_utc(filters.purchase_date_to))
    if filters.arrival_date_from is not None:
        stmt = stmt.where(Product.arrival_date >= as_utc(filters.arrival_date_from))
    if filters.arrival_date_to is not None:
        stmt = stmt.where(Product.arrival_date <= as_utc(filters.arrival_date_to))

    total = db.execute(
        select(func.count()).select_from(stmt.with_only_columns(Product.id).subquery())
    ).scalar_one()

    sort_key = filters.sort_by or DEFAULT_PRODUCT_SORT
    descending = filters.sort_descending
    if descending is None:
        descending = filters.sort_by is None
    sort_column = _SORT_COLUMNS[sort_key]
    if descending:
        stmt = stmt.order_by(sort_column.desc(), Product.id.desc())
    else:
        stmt = stmt.order_by(sort_column.asc(), Product.id.asc())

    page = max(filters.page, 1)
    page_size = max(filters.page_size, 1)
    items = _all(db, stmt.offset((page - 1) * page_size).limit(page_size))
    return ProductPageResult(items=items, total_count=int(total), page=page, page_size=page_size)


# ==============================
# Writes
# ==============================

def _check_relations(db, product_type_id, brand_id, model_id, color_id, condition_id):
    errors = find_relation_errors(db, product_type_id, brand_id, model_id, color_id, condition_id)
    if errors:
        logger.warning("Rejected product write with invalid relations: %s", errors)
        raise ValidationError("Invalid product relations.", errors=errors)


def create_product(db, payload, actor) -> Product:
    values = payload.model_dump(exclude_unset=False)
    _check_relations(db, *(values[field] for field in _RELATION_FIELDS))

    for field in _DATE_FIELDS:
        values[field] = as_utc(values.get(field))
    now = utcnow()
    if values.get("purchase_date") is None:
        values["purchase_date"] = now
    if values.get("status") is None:
        values["status"] = DEFAULT_PRODUCT_STATUS
    values["status"] = _normalize_status(values["status"])
    if not values["status"]:
        raise ValidationError.for_field("status", "Status must not be empty.")
    if values.get("transport_cost") is None:
        values["transport_cost"] = ZERO

    product = Product(**values)
    apply_financials(product)
    product.created_at = now
    product.created_by = actor
    product.is_deleted = False

    db.add(product)
    commit_or_raise(db, "creating product")
    db.refresh(product)
    logger.info(
        "Created product %s (%s) by %s",
        product.id,
        product.name,
        actor,
        extra={"product_id": product.id, "actor": actor},
    )
    return product


def update_product(db, product_id, payload, actor) -> Product:
    product = get_product(db, product_id)
    # null means "leave unchanged", same as an absent field
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }

    if any(field in changes and changes[field] != getattr(product, field) for field in _RELATION_FIELDS):
        merged = [changes.get(field, getattr(product, field)) for field in _RELATION_FIELDS]
        _check_relations(db, *merged)

    for field in _DATE_FIELDS:
        if field in changes:
            changes[field] = as_utc(changes[field])
    if "status" in changes:
        changes["status"] = _normalize_status(changes["status"])
        if not changes["status"]:
            raise ValidationError.for_field("status", "Status must not be empty.")

    for field, value in changes.items():
        setattr(product, field, value)
    apply_financials(product)
    product.updated_at = utcnow()
    product.updated_by = actor

    commit_or_raise(db, "updating product {}".format(product_id))
    db.refresh(product)
    logger.info("Updated product %s by %s (fields: %s)", product_id, actor, ", ".join(sorted(changes)) or "none")
    return product


def delete_product(db, product_id, actor) -> Product:
    product = get_product(db, product_id)
    product.mark_deleted(actor)
    commit_or_raise(db, "deleting product {}".format(product_id))
    logger.info(
        "Soft-deleted product %s by %s",
        product_id,
        actor,
        extra={"product_id": product_id, "actor": actor},
    )
    return product


def _touch(product, actor):
    product.updated_at = utcnow()
    product.updated_by = actor


def update_stock(db, product_id, new_stock, actor) -> Product:
    if new_stock < 0:
        raise ValidationError.for_field("newStock", "Stock cannot be negative.")
    product = get_product(db, product_id)
    product.stock = new_stock
    _touch(product, actor)
    commit_or_raise(db, "updating stock of product {}".format(product_id))
    logger.info("Stock of product %s set to %s", product_id, new_stock)
    return product


def adjust_stock(db, product_id, adjustment, actor) -> Product:
    product = get_product(db, product_id)
    product.stock = max((product.stock or 0) + adjustment, 0)
    _touch(product, actor)
    commit_or_raise(db, "adjusting stock of product {}".format(product_id))
    logger.info("Stock of product %s adjusted by %s to %s", product_id, adjustment, product.stock)
    return product


def set_status(db, product_id, status, actor) -> Product:
    status = _normalize_status(status)
    if not status:
        raise ValidationError.for_field("status", "Status must not be empty.")
    product = get_product(db, product_id)
    product.status = status
    _touch(product, actor)
    commit_or_raise(db, "changing status of product {}".format(product_id))
    logger.info("Status of product %s changed to %s", product_id, status)
    return product


def update_selling_price(db, product_id, new_price, actor) -> Product:
    new_price = to_money(new_price)
    if new_price <= ZERO:
        raise ValidationError.for_field("sellingPrice", "Selling price must be greater than 0.")
    product = get_product(db, product_id)
    product.selling_price = new_price
    apply_financials(product)
    _touch(product, actor)
    commit_or_raise(db, "updating price of product {}".format(product_id))
    logger.info("Selling price of product %s set to %s", product_id, new_price)
    return product


def update_margin_percentage(db, product_id, target_margin_percentage, actor) -> Product:
    product = get_product(db, product_id)
    new_price = selling_price_for_margin(product.total_cost_price, target_margin_percentage)
    if new_price <= ZERO:
        raise ValidationError.for_field(
            "targetMarginPercentage", "Target margin would make the selling price non-positive."
        )
    product.selling_price = new_price
    apply_financials(product)
    _touch(product, actor)
    commit_or_raise(db, "updating margin of product {}".format(product_id))
    logger.info("Margin of product %s targeted at %s%%", product_id, target_margin_percentage)
    return product


def adjust_selling_price_by_percentage(db, product_id, percentage, actor) -> Product:
    product = get_product(db, product_id)
    new_price = adjust_price_by_percentage(product.selling_price, percentage)
    if new_price <= ZERO:
        raise ValidationError.for_field("priceAdjustmentPercentage", "Adjusted price must stay above 0.")
    product.selling_price = new_price
    apply_financials(product)
    _touch(product, actor)
    commit_or_raise(db, "adjusting price of product {}".format(product_id))
    return product


# ==============================
# Bulk operations
# ==============================

def _run_bulk(product_ids: Iterable[int], operation: Callable[[int], object], label: str) -> BulkOperationResult:
    result = BulkOperationResult()
    for product_id in product_ids:
        try:
            operation(product_id)
        except DomainError as exc:
            result.error_count += 1
            result.errors.append(BulkError(product_id=product_id, message=exc.message))
            continue
        result.success_count += 1
        result.processed_ids.append(product_id)
    logger.info(
        "Bulk %s finished: %s succeeded, %s failed",
        label,
        result.success_count,
        result.error_count,
    )
    return result


def bulk_update_stock(db, product_ids, stock_adjustment, actor) -> BulkOperationResult:
    return _run_bulk(
        product_ids,
        lambda product_id: adjust_stock(db, product_id, stock_adjustment, actor),
        "stock update",
    )


def bulk_update_prices(db, product_ids, price_adjustment_percentage, actor) -> BulkOperationResult:
    return _run_bulk(
        product_ids,
        lambda product_id: adjust_selling_price_by_percentage(db, product_id, price_adjustment_percentage, actor),
        "price update",
    )


def bulk_update_status(db, product_ids, new_status, actor) -> BulkOperationResult:
    return _run_bulk(
        product_ids,
        lambda product_id: set_status(db, product_id, new_status, actor),
        "status update",
    )


def bulk_delete(db, product_ids, actor) -> BulkOperationResult:
    return _run_bulk(
        product_ids,
        lambda product_id: delete_product(db, product_id, actor),
        "delete",
    )


# ==============================
# Statistics
# ==============================

def _average(values):
    values = list(values)
    if not values:
        return ZERO
    return to_money(sum(values, ZERO) / len(values))


def _count_active(db, model):
    stmt = select(func.count(model.id)).where(model.is_deleted.is_(False), model.is_active.is_(True))
    return int(db.execute(stmt).scalar_one())


def product_stats(db) -> dict:
    products = list_all_products(db)
    return {
        "total_products": len(products),
        "active_products": sum(1 for product in products if product.status == DEFAULT_PRODUCT_STATUS),
        "low_stock_products": sum(1 for product in products if product.is_low_stock),
        "total_stock_value": to_money(sum((product.total_value for product in products), ZERO)),
        "total_margin": to_money(sum((product.margin * product.stock for product in products), ZERO)),
        "average_margin_percentage": _average(product.margin_percentage for product in products),
        "total_product_types": _count_active(db, ProductType),
        "total_brands": _count_active(db, Brand),
        "total_models": _count_active(db, Model),
    }


def product_type_stats(db) -> list[dict]:
    groups: dict[int, list[Product]] = {}
    for product in list_all_products(db):
        groups.setdefault(product.product_type_id, []).append(product)
    stats = []
    for product_type_id, products in groups.items():
        stats.append(
            {
                "product_type_id": product_type_id,
                "product_type_name": products[0].product_type.name,
                "product_count": len(products),
                "total_value": to_money(sum((product.total_value for product in products), ZERO)),
                "average_price": _average(product.selling_price for product in products),
                "low_stock_count": sum(1 for product in products if product.is_low_stock),
            }
        )
    return sorted(stats, key=lambda row: row["product_type_name"])


def brand_stats(db) -> list[dict]:
    groups: dict[int, list[Product]] = {}
    for product in list_all_products(db):
        groups.setdefault(product.brand_id, []).append(product)
    stats = []
    for brand_id, products in groups.items():
        brand = products[0].brand
        stats.append(
            {
                "brand_id": brand_id,
                "brand_name": brand.name,
                "product_type_name": brand.product_type.name if brand.product_type is not None else "",
                "product_count": len(products),
                "total_value": to_money(sum((product.total_value for product in products), ZERO)),
                "average_margin_percentage": _average(product.margin_percentage for product in products),
            }
        )
    return sorted(stats, key=lambda row: (row["product_type_name"], row["brand_name"]))


__all__ = [
    "ProductFilter",
    "ProductPageResult",
    "adjust_stock",
    "brand_stats",
    "bulk_delete",
    "bulk_update_prices",
    "bulk_update_status",
    "bulk_update_stock",
    "count_products",
    "create_product",
    "delete_product",
    "distinct_values",
    "find_product",
    "get_product",
    "list_all_products",
    "list_products",
    "low_stock_products",
    "product_exists",
    "product_stats",
    "product_type_stats",
    "products_by",
    "products_needing_attention",
    "recent_arrivals",
    "search_products",
    "set_status",
    "update_margin_percentage",
    "update_product",
    "update_selling_price",
    "update_stock",
]
