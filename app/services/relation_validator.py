import logging

from app.models.brand import Brand
from app.models.color import Color
from app.models.condition import Condition
from app.models.model import Model
from app.models.product_type import ProductType

logger = logging.getLogger(__name__)


def _usable(db, model, record_id):
    if record_id is None:
        return None
    row = db.get(model, record_id)
    if row is None or not row.is_usable:
        return None
    return row


def find_relation_errors(db, product_type_id, brand_id, model_id, color_id, condition_id):
    """Return ``[{"field", "message"}]`` describing every broken relation.

    A row that is missing, inactive or soft-deleted counts as broken, as does
    a brand outside the product type or a model outside the brand/type pair.
    """
    errors = []
    product_type = _usable(db, ProductType, product_type_id)
    brand = _usable(db, Brand, brand_id)
    model = _usable(db, Model, model_id)

    if product_type is None:
        errors.append({"field": "productTypeId", "message": "Unknown or inactive product type."})
    if brand is None:
        errors.append({"field": "brandId", "message": "Unknown or inactive brand."})
    elif brand.product_type_id != product_type_id:
        errors.append({"field": "brandId", "message": "Brand does not belong to the product type."})
    if model is None:
        errors.append({"field": "modelId", "message": "Unknown or inactive model."})
    else:
        if model.brand_id != brand_id:
            errors.append({"field": "modelId", "message": "Model does not belong to the brand."})
        if model.product_type_id != product_type_id:
            errors.append({"field": "modelId", "message": "Model does not belong to the product type."})
    if _usable(db, Color, color_id) is None:
        errors.append({"field": "colorId", "message": "Unknown or inactive color."})
    if _usable(db, Condition, condition_id) is None:
        errors.append({"field": "conditionId", "message": "Unknown or inactive condition."})
    return errors


def validate_relations(db, product_type_id, brand_id, model_id, color_id, condition_id) -> bool:
    errors = find_relation_errors(db, product_type_id, brand_id, model_id, color_id, condition_id)
    if errors:
        logger.warning(
            "Relation check failed (type=%s brand=%s model=%s color=%s condition=%s): %s",
            product_type_id,
            brand_id,
            model_id,
            color_id,
            condition_id,
            "; ".join(error["message"] for error in errors),
        )
    return not errors


def is_valid_brand_for_product_type(db, brand_id, product_type_id) -> bool:
    brand = _usable(db, Brand, brand_id)
    return brand is not None and brand.product_type_id == product_type_id


def is_valid_model_for_brand(db, model_id, brand_id) -> bool:
    model = _usable(db, Model, model_id)
    return model is not None and model.brand_id == brand_id


__all__ = [
    "find_relation_errors",
    "is_valid_brand_for_product_type",
    "is_valid_model_for_brand",
    "validate_relations",
]
