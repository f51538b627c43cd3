"""Explicit ORM -> wire mappings.

Every transformation is spelled out here so the derived fields
(reference names, total value, low stock, days in stock) stay visible.
"""

from app.core.dates import as_utc
from app.schemas.product import ProductListItem, ProductRead
from app.schemas.reference import (
    BrandDropdown,
    BrandRead,
    ColorDropdown,
    ColorRead,
    ConditionDropdown,
    ConditionRead,
    DropdownOption,
    ModelDropdown,
    ModelRead,
    ProductTypeRead,
)
from app.services.pricing import to_money


def _name(reference):
    return reference.name if reference is not None else ""


def product_to_read(product) -> ProductRead:
    color = product.color
    condition = product.condition
    return ProductRead(
        id=product.id,
        name=product.name,
        description=product.description,
        product_type_id=product.product_type_id,
        brand_id=product.brand_id,
        model_id=product.model_id,
        color_id=product.color_id,
        condition_id=product.condition_id,
        product_type_name=_name(product.product_type),
        brand_name=_name(product.brand),
        model_name=_name(product.model),
        color_name=_name(color),
        color_hex_code=color.hex_code if color is not None else None,
        condition_name=_name(condition),
        condition_quality_percentage=condition.quality_percentage if condition is not None else 0,
        purchase_price=to_money(product.purchase_price),
        transport_cost=to_money(product.transport_cost),
        total_cost_price=to_money(product.total_cost_price),
        selling_price=to_money(product.selling_price),
        margin=to_money(product.margin),
        margin_percentage=to_money(product.margin_percentage),
        stock=product.stock,
        min_stock_level=product.min_stock_level,
        storage=product.storage,
        memory=product.memory,
        processor=product.processor,
        screen_size=product.screen_size,
        supplier_name=product.supplier_name,
        supplier_city=product.supplier_city,
        purchase_date=as_utc(product.purchase_date),
        arrival_date=as_utc(product.arrival_date),
        import_batch=product.import_batch,
        invoice_number=product.invoice_number,
        status=product.status,
        is_active=not product.is_deleted,
        notes=product.notes,
        warranty_info=product.warranty_info,
        image_url=product.image_url,
        images_urls=product.images_urls,
        documents_urls=product.documents_urls,
        created_at=as_utc(product.created_at),
        created_by=product.created_by,
        updated_at=as_utc(product.updated_at),
        updated_by=product.updated_by,
        total_value=to_money(product.total_value),
        is_low_stock=bool(product.is_low_stock),
        days_in_stock=product.days_in_stock,
    )


def product_to_list_item(product) -> ProductListItem:
    return ProductListItem(
        id=product.id,
        name=product.name,
        product_type_name=_name(product.product_type),
        brand_name=_name(product.brand),
        model_name=_name(product.model),
        color_name=_name(product.color),
        color_hex_code=product.color.hex_code if product.color is not None else None,
        condition_name=_name(product.condition),
        selling_price=to_money(product.selling_price),
        purchase_price=to_money(product.purchase_price),
        margin_percentage=to_money(product.margin_percentage),
        stock=product.stock,
        is_low_stock=bool(product.is_low_stock),
        status=product.status,
        image_url=product.image_url,
        created_at=as_utc(product.created_at),
    )


# ==============================
# Dropdowns
# ==============================

def _dropdown_fields(row):
    return dict(
        id=row.id,
        name=row.name,
        description=row.description,
        sort_order=row.sort_order,
        is_active=row.is_active,
    )


def product_type_to_dropdown(row) -> DropdownOption:
    return DropdownOption(**_dropdown_fields(row))


def brand_to_dropdown(row) -> BrandDropdown:
    return BrandDropdown(product_type_id=row.product_type_id, **_dropdown_fields(row))


def model_to_dropdown(row) -> ModelDropdown:
    return ModelDropdown(
        product_type_id=row.product_type_id,
        brand_id=row.brand_id,
        release_year=row.release_year,
        **_dropdown_fields(row),
    )


def color_to_dropdown(row) -> ColorDropdown:
    return ColorDropdown(hex_code=row.hex_code, **_dropdown_fields(row))


def condition_to_dropdown(row) -> ConditionDropdown:
    return ConditionDropdown(quality_percentage=row.quality_percentage, **_dropdown_fields(row))


# ==============================
# Reference management reads
# ==============================

def product_type_to_read(row) -> ProductTypeRead:
    return ProductTypeRead.model_validate(row)


def brand_to_read(row) -> BrandRead:
    data = BrandRead.model_validate(row).model_dump()
    data["product_type_name"] = _name(row.product_type)
    return BrandRead(**data)


def model_to_read(row) -> ModelRead:
    data = ModelRead.model_validate(row).model_dump()
    data["product_type_name"] = _name(row.product_type)
    data["brand_name"] = _name(row.brand)
    return ModelRead(**data)


def color_to_read(row) -> ColorRead:
    return ColorRead.model_validate(row)


def condition_to_read(row) -> ConditionRead:
    return ConditionRead.model_validate(row)
