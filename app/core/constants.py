from decimal import Decimal

STATUS_AVAILABLE = "Available"
STATUS_SOLD = "Sold"
STATUS_RESERVED = "Reserved"
STATUS_OUT_OF_STOCK = "OutOfStock"

PRODUCT_STATUSES = (STATUS_AVAILABLE, STATUS_SOLD, STATUS_RESERVED, STATUS_OUT_OF_STOCK)
DEFAULT_PRODUCT_STATUS = STATUS_AVAILABLE

DEFAULT_MIN_STOCK_LEVEL = 5
DEFAULT_QUALITY_PERCENTAGE = 100

SEED_ACTOR = "System"

MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

PRODUCT_SORT_FIELDS = (
    "name",
    "sellingPrice",
    "purchasePrice",
    "marginPercentage",
    "stock",
    "createdAt",
    "purchaseDate",
    "arrivalDate",
)
DEFAULT_PRODUCT_SORT = "createdAt"
