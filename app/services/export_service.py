import logging
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from app.core.dates import as_utc
from app.services.pricing import to_money

logger = logging.getLogger(__name__)

EXPORT_SHEET_TITLE = "Products"
EXPORT_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, value getter)
EXPORT_COLUMNS = (
    ("Id", lambda p: p.id),
    ("Name", lambda p: p.name),
    ("Product Type", lambda p: p.product_type.name if p.product_type else ""),
    ("Brand", lambda p: p.brand.name if p.brand else ""),
    ("Model", lambda p: p.model.name if p.model else ""),
    ("Color", lambda p: p.color.name if p.color else ""),
    ("Condition", lambda p: p.condition.name if p.condition else ""),
    ("Purchase Price", lambda p: float(to_money(p.purchase_price))),
    ("Transport Cost", lambda p: float(to_money(p.transport_cost))),
    ("Total Cost", lambda p: float(to_money(p.total_cost_price))),
    ("Selling Price", lambda p: float(to_money(p.selling_price))),
    ("Margin", lambda p: float(to_money(p.margin))),
    ("Margin %", lambda p: float(to_money(p.margin_percentage))),
    ("Stock", lambda p: p.stock),
    ("Min Stock", lambda p: p.min_stock_level),
    ("Low Stock", lambda p: "Yes" if p.is_low_stock else "No"),
    ("Status", lambda p: p.status),
    ("Supplier", lambda p: p.supplier_name),
    ("Supplier City", lambda p: p.supplier_city or ""),
    ("Import Batch", lambda p: p.import_batch),
    ("Invoice", lambda p: p.invoice_number),
    ("Purchase Date", lambda p: _excel_datetime(p.purchase_date)),
    ("Arrival Date", lambda p: _excel_datetime(p.arrival_date)),
    ("Days In Stock", lambda p: p.days_in_stock),
)


def _excel_datetime(value):
    # openpyxl rejects tz-aware datetimes
    value = as_utc(value)
    if value is None:
        return None
    return value.replace(tzinfo=None)


def build_products_workbook(products) -> Workbook:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = EXPORT_SHEET_TITLE

    for column, (header, _getter) in enumerate(EXPORT_COLUMNS, start=1):
        cell = worksheet.cell(row=1, column=column, value=header)
        cell.font = Font(bold=True)

    for row, product in enumerate(products, start=2):
        for column, (_header, getter) in enumerate(EXPORT_COLUMNS, start=1):
            worksheet.cell(row=row, column=column, value=getter(product))

    worksheet.freeze_panes = "A2"
    return workbook


def export_products_xlsx(products) -> bytes:
    products = list(products)
    buffer = BytesIO()
    build_products_workbook(products).save(buffer)
    logger.info("Exported %s products to xlsx", len(products))
    return buffer.getvalue()


__all__ = [
    "EXPORT_COLUMNS",
    "EXPORT_MEDIA_TYPE",
    "build_products_workbook",
    "export_products_xlsx",
]
