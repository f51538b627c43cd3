import logging

from sqlalchemy import func, select

from app.core.dates import utcnow
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.database.session import commit_or_raise
from app.models import (
    REFERENCE_MODELS,
    Brand,
    Color,
    Condition,
    Model,
    Product,
    ProductType,
)

logger = logging.getLogger(__name__)

# URL segment -> table
REFERENCE_KINDS = REFERENCE_MODELS

_ENTITY_LABELS = {
    ProductType: "Product type",
    Brand: "Brand",
    Model: "Model",
    Color: "Color",
    Condition: "Condition",
}

# Name uniqueness is scoped to the parent for the hierarchical tables
_NAME_SCOPE = {
    Brand: "product_type_id",
    Model: "brand_id",
}

# (referencing model, foreign key column) pairs that block a soft delete
_DEPENDENTS = {
    ProductType: ((Product, "product_type_id"), (Brand, "product_type_id"), (Model, "product_type_id")),
    Brand: ((Product, "brand_id"), (Model, "brand_id")),
    Model: ((Product, "model_id"),),
    Color: ((Product, "color_id"),),
    Condition: ((Product, "condition_id"),),
}


def _active_ordered(model):
    return (
        select(model)
        .where(model.is_active.is_(True), model.is_deleted.is_(False))
        .order_by(model.sort_order, model.name)
    )


# ==============================
# Dropdowns
# ==============================

def list_product_types(db):
    return list(db.execute(_active_ordered(ProductType)).scalars().all())


def list_brands(db, product_type_id=None):
    stmt = _active_ordered(Brand)
    if product_type_id is not None:
        stmt = stmt.where(Brand.product_type_id == product_type_id)
    return list(db.execute(stmt).scalars().all())


def list_models(db, product_type_id=None, brand_id=None):
    stmt = _active_ordered(Model)
    if product_type_id is not None:
        stmt = stmt.where(Model.product_type_id == product_type_id)
    if brand_id is not None:
        stmt = stmt.where(Model.brand_id == brand_id)
    return list(db.execute(stmt).scalars().all())


def list_colors(db):
    return list(db.execute(_active_ordered(Color)).scalars().all())


def list_conditions(db):
    return list(db.execute(_active_ordered(Condition)).scalars().all())


# ==============================
# Catalog management
# ==============================

def resolve_kind(kind):
    model = REFERENCE_KINDS.get(kind)
    if model is None:
        raise NotFoundError("Reference table", kind)
    return model


def list_references(db, kind):
    """All non-deleted rows of a reference table, inactive ones included."""
    model = resolve_kind(kind)
    stmt = (
        select(model)
        .where(model.is_deleted.is_(False))
        .order_by(model.sort_order, model.name)
    )
    return list(db.execute(stmt).scalars().all())


def get_reference(db, kind, record_id):
    model = resolve_kind(kind)
    row = db.get(model, record_id)
    if row is None or row.is_deleted:
        raise NotFoundError(_ENTITY_LABELS[model], record_id)
    return row


def _require_usable(db, model, record_id, field):
    row = db.get(model, record_id) if record_id is not None else None
    if row is None or not row.is_usable:
        raise ValidationError.for_field(
            field, "{} {} is missing or inactive.".format(_ENTITY_LABELS[model], record_id)
        )
    return row


def _ensure_unique_name(db, model, name, scope_value=None, exclude_id=None):
    stmt = select(model.id).where(
        func.lower(model.name) == name.strip().lower(),
        model.is_deleted.is_(False),
    )
    scope_column = _NAME_SCOPE.get(model)
    if scope_column is not None:
        stmt = stmt.where(getattr(model, scope_column) == scope_value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if db.execute(stmt.limit(1)).first() is not None:
        raise ConflictError(
            "{} '{}' already exists.".format(_ENTITY_LABELS[model], name),
            errors=[{"field": "name", "message": "Name already in use."}],
        )


def _resolve_hierarchy(db, model, values, current=None):
    """Fill and check the parent ids of a brand or model before writing."""
    if model is Brand:
        product_type_id = values.get("product_type_id")
        if product_type_id is None and current is not None:
            product_type_id = current.product_type_id
        _require_usable(db, ProductType, product_type_id, "productTypeId")
        if current is not None and product_type_id != current.product_type_id:
            has_models = db.execute(
                select(Model.id)
                .where(Model.brand_id == current.id, Model.is_deleted.is_(False))
                .limit(1)
            ).first()
            if has_models is not None:
                raise ConflictError(
                    "Brand {} still has models; it cannot move to another product type.".format(current.id),
                    errors=[{"field": "productTypeId", "message": "Brand has models under its current type."}],
                )
        values["product_type_id"] = product_type_id
    elif model is Model:
        brand_id = values.get("brand_id")
        if brand_id is None and current is not None:
            brand_id = current.brand_id
        brand = _require_usable(db, Brand, brand_id, "brandId")
        requested_type = values.get("product_type_id")
        if requested_type is not None and requested_type != brand.product_type_id:
            raise ValidationError.for_field(
                "productTypeId", "Model product type must match the brand's product type."
            )
        if current is not None and (
            brand.id != current.brand_id or brand.product_type_id != current.product_type_id
        ):
            has_products = db.execute(
                select(Product.id)
                .where(Product.model_id == current.id, Product.is_deleted.is_(False))
                .limit(1)
            ).first()
            if has_products is not None:
                raise ConflictError(
                    "Model {} is used by products; it cannot move to another brand.".format(current.id),
                    errors=[{"field": "brandId", "message": "Model has products under its current brand."}],
                )
        values["brand_id"] = brand.id
        values["product_type_id"] = brand.product_type_id
    return values


def create_reference(db, kind, payload, actor):
    model = resolve_kind(kind)
    values = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    values = _resolve_hierarchy(db, model, values)
    scope_column = _NAME_SCOPE.get(model)
    _ensure_unique_name(db, model, values["name"], values.get(scope_column) if scope_column else None)

    row = model(**values)
    row.name = row.name.strip()
    row.created_at = utcnow()
    row.created_by = actor
    db.add(row)
    commit_or_raise(db, "creating {}".format(kind))
    db.refresh(row)
    logger.info("Created %s %s (%s) by %s", kind, row.id, row.name, actor)
    return row


def update_reference(db, kind, record_id, payload, actor):
    model = resolve_kind(kind)
    row = get_reference(db, kind, record_id)
    values = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    if model in (Brand, Model):
        values = _resolve_hierarchy(db, model, values, current=row)

    scope_column = _NAME_SCOPE.get(model)
    new_name = values.get("name", row.name)
    scope_value = values.get(scope_column, getattr(row, scope_column)) if scope_column else None
    _ensure_unique_name(db, model, new_name, scope_value, exclude_id=row.id)

    for key, value in values.items():
        setattr(row, key, value)
    row.updated_at = utcnow()
    row.updated_by = actor
    commit_or_raise(db, "updating {} {}".format(kind, record_id))
    db.refresh(row)
    logger.info("Updated %s %s by %s", kind, record_id, actor)
    return row


def delete_reference(db, kind, record_id, actor):
    model = resolve_kind(kind)
    row = get_reference(db, kind, record_id)
    for dependent, column_name in _DEPENDENTS[model]:
        column = getattr(dependent, column_name)
        in_use = db.execute(
            select(dependent.id)
            .where(column == record_id, dependent.is_deleted.is_(False))
            .limit(1)
        ).first()
        if in_use is not None:
            table = dependent.__tablename__
            logger.warning("Refused delete of %s %s: still referenced by %s", kind, record_id, table)
            raise ConflictError(
                "{} {} is still referenced by {}.".format(_ENTITY_LABELS[model], record_id, table)
            )
    row.mark_deleted(actor)
    commit_or_raise(db, "deleting {} {}".format(kind, record_id))
    logger.info("Soft-deleted %s %s by %s", kind, record_id, actor)
    return row


__all__ = [
    "REFERENCE_KINDS",
    "create_reference",
    "delete_reference",
    "get_reference",
    "list_brands",
    "list_colors",
    "list_conditions",
    "list_models",
    "list_product_types",
    "list_references",
    "resolve_kind",
    "update_reference",
]
