"""Initial reference catalog and optional sample stock."""

import logging
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import delete, select

from app.core.constants import DEFAULT_PRODUCT_STATUS, SEED_ACTOR
from app.core.dates import utcnow
from app.database.session import commit_or_raise
from app.models import Brand, Color, Condition, Model, Product, ProductType
from app.services.pricing import apply_financials

logger = logging.getLogger(__name__)

PRODUCT_TYPES = (
    ("Smartphone", "Téléphones mobiles intelligents (Android, iOS)", "📱", "#007AFF"),
    ("Laptop", "Ordinateurs portables (Windows, macOS, Linux)", "💻", "#34C759"),
    ("Tablet", "Tablettes tactiles (iPad, Android, Windows)", "📔", "#FF9500"),
    ("Camera", "Appareils photo et caméras (DSLR, mirrorless, action cam)", "📸", "#FF3B30"),
    ("Accessoire", "Accessoires électroniques (coques, chargeurs, écouteurs, etc.)", "🔌", "#8E8E93"),
)

BRANDS = {
    "Smartphone": ("Samsung", "Apple", "Xiaomi", "OnePlus", "Google"),
    "Laptop": ("Apple", "Dell", "HP", "Lenovo", "ASUS"),
    "Tablet": ("Apple", "Samsung", "Microsoft"),
    "Camera": ("Canon", "Nikon", "Sony", "GoPro"),
    "Accessoire": ("Anker", "Belkin", "Logitech"),
}

# (product type, brand) -> ((model, release year), ...)
MODELS = {
    ("Smartphone", "Samsung"): (
        ("Galaxy S24 Ultra", 2024),
        ("Galaxy S24", 2024),
        ("Galaxy A55", 2024),
        ("Galaxy A34", 2023),
    ),
    ("Smartphone", "Apple"): (
        ("iPhone 15 Pro Max", 2023),
        ("iPhone 15 Pro", 2023),
        ("iPhone 15", 2023),
        ("iPhone 14", 2022),
    ),
    ("Laptop", "Apple"): (("MacBook Air M2", 2022), ('MacBook Pro 14"', 2023)),
    ("Laptop", "Dell"): (("XPS 13 Plus", 2022), ("Inspiron 15 3000", 2023)),
    ("Tablet", "Apple"): (("iPad Air 5", 2022), ('iPad Pro 12.9"', 2022)),
}

COLORS = (
    ("Noir", "#000000"),
    ("Blanc", "#FFFFFF"),
    ("Gris", "#808080"),
    ("Gris Sidéral", "#666666"),
    ("Bleu", "#0066CC"),
    ("Bleu Titane", "#4A90E2"),
    ("Rouge", "#FF0000"),
    ("Rose", "#FFB6C1"),
    ("Violet", "#8A2BE2"),
    ("Vert", "#00FF00"),
    ("Jaune", "#FFFF00"),
    ("Or", "#FFD700"),
    ("Argent", "#C0C0C0"),
    ("Platine", "#E5E4E2"),
)

CONDITIONS = (
    ("Neuf", "Produit neuf, jamais utilisé", 100),
    ("Excellent", "Aucune trace d'usure visible", 95),
    ("Très Bon", "Légères traces d'usure", 90),
    ("Bon", "Traces d'usure visibles, parfaitement fonctionnel", 80),
    ("Correct", "Usure marquée, fonctionnel", 70),
)

SAMPLE_PRODUCTS = (
    {
        "name": "Samsung Galaxy A55 5G",
        "description": "Smartphone Samsung Galaxy A55 5G 8/256GB en excellent état",
        "refs": ("Smartphone", "Samsung", "Galaxy A55", "Bleu", "Très Bon"),
        "storage": "256GB",
        "memory": "8GB",
        "screen_size": '6.6"',
        "prices": ("200.00", "15.00", "280.00"),
        "stock": (5, 2),
        "supplier": ("TechItalia SRL", "Milano"),
        "days": (15, 10),
        "batch": ("IT2025001", "INV-2025-001"),
    },
    {
        "name": "iPhone 15 128GB",
        "description": "Apple iPhone 15 128GB Noir en parfait état avec boîte",
        "refs": ("Smartphone", "Apple", "iPhone 15", "Noir", "Excellent"),
        "storage": "128GB",
        "memory": "6GB",
        "screen_size": '6.1"',
        "prices": ("650.00", "20.00", "799.00"),
        "stock": (3, 1),
        "supplier": ("MobileWorld Italia", "Roma"),
        "days": (20, 12),
        "batch": ("IT2025002", "INV-2025-002"),
    },
    {
        "name": "Samsung Galaxy A34 5G",
        "description": "Samsung Galaxy A34 5G 6/128GB reconditionné",
        "refs": ("Smartphone", "Samsung", "Galaxy A34", "Noir", "Bon"),
        "storage": "128GB",
        "memory": "6GB",
        "screen_size": '6.6"',
        "prices": ("150.00", "12.00", "220.00"),
        "stock": (8, 3),
        "supplier": ("RefurbItalia", "Napoli"),
        "days": (30, 25),
        "batch": ("IT2025001", "INV-2025-003"),
    },
    {
        "name": "Dell XPS 13 Plus",
        "description": "Dell XPS 13 Plus i7 16GB/512GB",
        "refs": ("Laptop", "Dell", "XPS 13 Plus", "Argent", "Excellent"),
        "storage": "512GB SSD",
        "memory": "16GB",
        "processor": "Intel Core i7-1260P",
        "screen_size": '13.4"',
        "prices": ("800.00", "35.00", "1150.00"),
        "stock": (2, 1),
        "supplier": ("ComputerItalia", "Torino"),
        "days": (10, 5),
        "batch": ("IT2025003", "INV-2025-004"),
    },
    {
        "name": "MacBook Air M2",
        "description": "Apple MacBook Air M2 8GB/256GB Gris Sidéral",
        "refs": ("Laptop", "Apple", "MacBook Air M2", "Gris Sidéral", "Neuf"),
        "storage": "256GB SSD",
        "memory": "8GB",
        "processor": "Apple M2",
        "screen_size": '13.6"',
        "prices": ("950.00", "40.00", "1299.00"),
        "stock": (1, 1),
        "supplier": ("AppleStore Milano", "Milano"),
        "days": (7, 3),
        "batch": ("IT2025004", "INV-2025-005"),
    },
    {
        "name": "iPad Air 5th Gen",
        "description": "Apple iPad Air 5 64GB WiFi Bleu",
        "refs": ("Tablet", "Apple", "iPad Air 5", "Bleu", "Très Bon"),
        "storage": "64GB",
        "memory": "8GB",
        "screen_size": '10.9"',
        "prices": ("400.00", "18.00", "549.00"),
        "stock": (4, 2),
        "supplier": ("TabletItalia", "Bologna"),
        "days": (25, 20),
        "batch": ("IT2025002", "INV-2025-006"),
    },
)


def _stamp(row, sort_order):
    row.sort_order = sort_order
    row.is_active = True
    row.created_by = SEED_ACTOR
    return row


def has_reference_data(db) -> bool:
    return db.execute(select(ProductType.id).limit(1)).first() is not None


def seed_reference_data(db) -> bool:
    """Insert the default catalog; a no-op when product types already exist."""
    if has_reference_data(db):
        logger.info("Reference seed skipped: product types already exist")
        return False

    types = {}
    for order, (name, description, icon, color) in enumerate(PRODUCT_TYPES, start=1):
        types[name] = _stamp(
            ProductType(name=name, description=description, icon_url=icon, category_color=color),
            order,
        )
    db.add_all(types.values())
    db.flush()

    brands = {}
    for type_name, names in BRANDS.items():
        for order, name in enumerate(names, start=1):
            brands[(type_name, name)] = _stamp(
                Brand(name=name, product_type_id=types[type_name].id), order
            )
    db.add_all(brands.values())
    db.flush()

    for (type_name, brand_name), entries in MODELS.items():
        brand = brands[(type_name, brand_name)]
        for order, (name, year) in enumerate(entries, start=1):
            db.add(
                _stamp(
                    Model(
                        name=name,
                        product_type_id=brand.product_type_id,
                        brand_id=brand.id,
                        release_year=year,
                    ),
                    order,
                )
            )

    for order, (name, hex_code) in enumerate(COLORS, start=1):
        db.add(_stamp(Color(name=name, hex_code=hex_code), order))
    for order, (name, description, quality) in enumerate(CONDITIONS, start=1):
        db.add(_stamp(Condition(name=name, description=description, quality_percentage=quality), order))

    commit_or_raise(db, "seeding reference data")
    logger.info(
        "Seeded reference data: %s product types, %s brands, %s colors, %s conditions",
        len(types),
        len(brands),
        len(COLORS),
        len(CONDITIONS),
    )
    return True


def _lookup(db, model, name, **scope):
    stmt = select(model).where(model.name == name, model.is_deleted.is_(False))
    for column, value in scope.items():
        stmt = stmt.where(getattr(model, column) == value)
    return db.execute(stmt.limit(1)).scalars().first()


def seed_sample_products(db) -> int:
    """Add demo stock on top of the seeded catalog; skipped when products exist."""
    if db.execute(select(Product.id).limit(1)).first() is not None:
        logger.info("Sample products skipped: products already exist")
        return 0

    now = utcnow()
    created = 0
    for sample in SAMPLE_PRODUCTS:
        type_name, brand_name, model_name, color_name, condition_name = sample["refs"]
        product_type = _lookup(db, ProductType, type_name)
        brand = _lookup(db, Brand, brand_name, product_type_id=product_type.id) if product_type else None
        model = _lookup(db, Model, model_name, brand_id=brand.id) if brand else None
        color = _lookup(db, Color, color_name)
        condition = _lookup(db, Condition, condition_name)
        if None in (product_type, brand, model, color, condition):
            logger.warning("Sample product %s skipped: reference data missing", sample["name"])
            continue

        purchase, transport, selling = (Decimal(value) for value in sample["prices"])
        stock, min_stock_level = sample["stock"]
        supplier_name, supplier_city = sample["supplier"]
        purchased_days_ago, arrived_days_ago = sample["days"]
        import_batch, invoice_number = sample["batch"]

        product = Product(
            name=sample["name"],
            description=sample["description"],
            product_type_id=product_type.id,
            brand_id=brand.id,
            model_id=model.id,
            color_id=color.id,
            condition_id=condition.id,
            storage=sample.get("storage"),
            memory=sample.get("memory"),
            processor=sample.get("processor"),
            screen_size=sample.get("screen_size"),
            purchase_price=purchase,
            transport_cost=transport,
            selling_price=selling,
            stock=stock,
            min_stock_level=min_stock_level,
            supplier_name=supplier_name,
            supplier_city=supplier_city,
            purchase_date=now - timedelta(days=purchased_days_ago),
            arrival_date=now - timedelta(days=arrived_days_ago),
            import_batch=import_batch,
            invoice_number=invoice_number,
            status=DEFAULT_PRODUCT_STATUS,
            created_at=now,
            created_by=SEED_ACTOR,
        )
        apply_financials(product)
        db.add(product)
        created += 1

    commit_or_raise(db, "seeding sample products")
    logger.info("Seeded %s sample products", created)
    return created


def clear_catalog(db) -> None:
    """Hard-delete every product and reference row, children first."""
    for model in (Product, Model, Brand, Color, Condition, ProductType):
        db.execute(delete(model))
    commit_or_raise(db, "clearing catalog")
    logger.warning("Catalog cleared")


__all__ = [
    "clear_catalog",
    "has_reference_data",
    "seed_reference_data",
    "seed_sample_products",
]
