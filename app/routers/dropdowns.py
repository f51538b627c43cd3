from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.dependencies import get_db
from app.schemas.reference import (
    BrandDropdown,
    ColorDropdown,
    ConditionDropdown,
    DropdownOption,
    ModelDropdown,
)
from app.services import reference_service
from app.services.mappers import (
    brand_to_dropdown,
    color_to_dropdown,
    condition_to_dropdown,
    model_to_dropdown,
    product_type_to_dropdown,
)

router = APIRouter(prefix="/products/dropdowns", tags=["Dropdowns"])


@router.get("/product-types", response_model=List[DropdownOption])
def product_types_dropdown(db: Session = Depends(get_db)):
    return [product_type_to_dropdown(row) for row in reference_service.list_product_types(db)]


@router.get("/brands", response_model=List[BrandDropdown])
def brands_dropdown(
    product_type_id: Optional[int] = Query(None, alias="productTypeId"),
    db: Session = Depends(get_db),
):
    rows = reference_service.list_brands(db, product_type_id=product_type_id)
    return [brand_to_dropdown(row) for row in rows]


@router.get("/models", response_model=List[ModelDropdown])
def models_dropdown(
    product_type_id: Optional[int] = Query(None, alias="productTypeId"),
    brand_id: Optional[int] = Query(None, alias="brandId"),
    db: Session = Depends(get_db),
):
    rows = reference_service.list_models(db, product_type_id=product_type_id, brand_id=brand_id)
    return [model_to_dropdown(row) for row in rows]


@router.get("/colors", response_model=List[ColorDropdown])
def colors_dropdown(db: Session = Depends(get_db)):
    return [color_to_dropdown(row) for row in reference_service.list_colors(db)]


@router.get("/conditions", response_model=List[ConditionDropdown])
def conditions_dropdown(db: Session = Depends(get_db)):
    return [condition_to_dropdown(row) for row in reference_service.list_conditions(db)]


__all__ = ["router"]
