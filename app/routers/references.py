"""Management endpoints for the five reference tables.

Each kind gets list / get / create / update / delete under
``/references/<kind>``; the dropdown views live in ``dropdowns.py``.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_actor, get_db
from app.schemas.common import ErrorResponse
from app.schemas.reference import (
    BrandCreate,
    BrandRead,
    BrandUpdate,
    ColorCreate,
    ColorRead,
    ColorUpdate,
    ConditionCreate,
    ConditionRead,
    ConditionUpdate,
    ModelCreate,
    ModelRead,
    ModelUpdate,
    ProductTypeCreate,
    ProductTypeRead,
    ProductTypeUpdate,
)
from app.services import reference_service
from app.services.mappers import (
    brand_to_read,
    color_to_read,
    condition_to_read,
    model_to_read,
    product_type_to_read,
)

router = APIRouter(
    prefix="/references",
    tags=["References"],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)

# kind -> (create schema, update schema, read schema, mapper)
REFERENCE_ENDPOINTS = {
    "product-types": (ProductTypeCreate, ProductTypeUpdate, ProductTypeRead, product_type_to_read),
    "brands": (BrandCreate, BrandUpdate, BrandRead, brand_to_read),
    "models": (ModelCreate, ModelUpdate, ModelRead, model_to_read),
    "colors": (ColorCreate, ColorUpdate, ColorRead, color_to_read),
    "conditions": (ConditionCreate, ConditionUpdate, ConditionRead, condition_to_read),
}


def _register(kind, create_schema, update_schema, read_schema, to_read):
    label = kind.replace("-", "_")

    def list_rows(db: Session = Depends(get_db)):
        return [to_read(row) for row in reference_service.list_references(db, kind)]

    def get_row(record_id: int, db: Session = Depends(get_db)):
        return to_read(reference_service.get_reference(db, kind, record_id))

    def create_row(
        payload: create_schema,
        response: Response,
        db: Session = Depends(get_db),
        actor: str = Depends(get_current_actor),
    ):
        row = reference_service.create_reference(db, kind, payload, actor)
        response.headers["Location"] = "/references/{}/{}".format(kind, row.id)
        return to_read(row)

    def update_row(
        record_id: int,
        payload: update_schema,
        db: Session = Depends(get_db),
        actor: str = Depends(get_current_actor),
    ):
        return to_read(reference_service.update_reference(db, kind, record_id, payload, actor))

    def delete_row(
        record_id: int,
        db: Session = Depends(get_db),
        actor: str = Depends(get_current_actor),
    ):
        reference_service.delete_reference(db, kind, record_id, actor)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    base = "/" + kind
    router.add_api_route(
        base, list_rows, methods=["GET"], response_model=List[read_schema], name="list_" + label
    )
    router.add_api_route(
        base + "/{record_id}", get_row, methods=["GET"], response_model=read_schema, name="get_" + label
    )
    router.add_api_route(
        base,
        create_row,
        methods=["POST"],
        response_model=read_schema,
        status_code=status.HTTP_201_CREATED,
        name="create_" + label,
    )
    router.add_api_route(
        base + "/{record_id}",
        update_row,
        methods=["PUT"],
        response_model=read_schema,
        name="update_" + label,
    )
    router.add_api_route(
        base + "/{record_id}",
        delete_row,
        methods=["DELETE"],
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        name="delete_" + label,
    )


for _kind, _schemas in REFERENCE_ENDPOINTS.items():
    _register(_kind, *_schemas)


__all__ = ["REFERENCE_ENDPOINTS", "router"]
