from app.services.export_service import export_products_xlsx
from app.services.pricing import compute_financials
from app.services.relation_validator import validate_relations
from app.services.seed_service import seed_reference_data, seed_sample_products

__all__ = [
    "compute_financials",
    "export_products_xlsx",
    "seed_reference_data",
    "seed_sample_products",
    "validate_relations",
]
