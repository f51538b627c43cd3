import importlib

from app.models.brand import Brand
from app.models.color import Color
from app.models.condition import Condition
from app.models.model import Model
from app.models.product import Product
from app.models.product_type import ProductType

REFERENCE_MODELS = {
    "product-types": ProductType,
    "brands": Brand,
    "models": Model,
    "colors": Color,
    "conditions": Condition,
}


def import_all_models() -> None:
    for module_name in (
        "app.models.product_type",
        "app.models.brand",
        "app.models.model",
        "app.models.color",
        "app.models.condition",
        "app.models.product",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Brand",
    "Color",
    "Condition",
    "Model",
    "Product",
    "ProductType",
    "REFERENCE_MODELS",
    "import_all_models",
]
