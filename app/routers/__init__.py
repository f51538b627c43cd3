from app.routers.dropdowns import router as dropdowns_router
from app.routers.health import router as health_router
from app.routers.products import router as products_router
from app.routers.references import router as references_router

__all__ = [
    "dropdowns_router",
    "health_router",
    "products_router",
    "references_router",
]
