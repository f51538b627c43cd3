from decimal import Decimal
from types import SimpleNamespace

from sqlalchemy.orm import sessionmaker

from app.database.base import Base
from app.database.engine import build_engine
from app.models import Brand, Color, Condition, Model, ProductType, import_all_models
from app.schemas.product import ProductCreate


def make_session_factory():
    engine = build_engine("sqlite:///:memory:")
    import_all_models()
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def make_session():
    return make_session_factory()()


def seed_catalog(db):
    """Two product types, three brands, three models, two colors, two conditions."""
    smartphone = ProductType(name="Smartphone", sort_order=1, created_by="test")
    laptop = ProductType(name="Laptop", sort_order=2, created_by="test")
    db.add_all([smartphone, laptop])
    db.flush()

    samsung = Brand(name="Samsung", product_type_id=smartphone.id, sort_order=1, created_by="test")
    apple = Brand(name="Apple", product_type_id=smartphone.id, sort_order=2, created_by="test")
    dell = Brand(name="Dell", product_type_id=laptop.id, sort_order=1, created_by="test")
    db.add_all([samsung, apple, dell])
    db.flush()

    galaxy = Model(
        name="Galaxy S24",
        product_type_id=smartphone.id,
        brand_id=samsung.id,
        release_year=2024,
        sort_order=1,
        created_by="test",
    )
    iphone = Model(
        name="iPhone 15",
        product_type_id=smartphone.id,
        brand_id=apple.id,
        release_year=2023,
        sort_order=1,
        created_by="test",
    )
    xps = Model(
        name="XPS 13 Plus",
        product_type_id=laptop.id,
        brand_id=dell.id,
        release_year=2022,
        sort_order=1,
        created_by="test",
    )
    black = Color(name="Noir", hex_code="#000000", sort_order=1, created_by="test")
    silver = Color(name="Argent", hex_code="#C0C0C0", sort_order=2, created_by="test")
    excellent = Condition(name="Excellent", quality_percentage=95, sort_order=1, created_by="test")
    good = Condition(name="Bon", quality_percentage=80, sort_order=2, created_by="test")
    db.add_all([galaxy, iphone, xps, black, silver, excellent, good])
    db.commit()

    return SimpleNamespace(
        smartphone=smartphone,
        laptop=laptop,
        samsung=samsung,
        apple=apple,
        dell=dell,
        galaxy=galaxy,
        iphone=iphone,
        xps=xps,
        black=black,
        silver=silver,
        excellent=excellent,
        good=good,
    )


def product_payload(catalog, **overrides) -> ProductCreate:
    values = dict(
        name="Galaxy S24 256GB",
        description="Refurbished Galaxy S24",
        product_type_id=catalog.smartphone.id,
        brand_id=catalog.samsung.id,
        model_id=catalog.galaxy.id,
        color_id=catalog.black.id,
        condition_id=catalog.excellent.id,
        purchase_price=Decimal("950.00"),
        transport_cost=Decimal("30.00"),
        selling_price=Decimal("1299.00"),
        stock=10,
        min_stock_level=5,
        supplier_name="TechItalia SRL",
        import_batch="IT2025001",
        invoice_number="INV-2025-001",
    )
    values.update(overrides)
    return ProductCreate(**values)
