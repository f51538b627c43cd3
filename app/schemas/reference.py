from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


# ==============================
# Dropdown payloads
# ==============================

class DropdownOption(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class BrandDropdown(DropdownOption):
    product_type_id: int


class ModelDropdown(DropdownOption):
    product_type_id: int
    brand_id: int
    release_year: Optional[int] = None


class ColorDropdown(DropdownOption):
    hex_code: Optional[str] = None


class ConditionDropdown(DropdownOption):
    quality_percentage: int = 100


# ==============================
# Reference catalog management
# ==============================

class ReferenceWrite(CamelModel):
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class ReferenceRead(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    sort_order: int
    is_active: bool
    created_at: datetime
    created_by: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


class ProductTypeCreate(ReferenceWrite):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon_url: Optional[str] = Field(None, max_length=500)
    category_color: Optional[str] = Field(None, max_length=7)


class ProductTypeUpdate(ReferenceWrite):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon_url: Optional[str] = Field(None, max_length=500)
    category_color: Optional[str] = Field(None, max_length=7)


class ProductTypeRead(ReferenceRead):
    icon_url: Optional[str] = None
    category_color: Optional[str] = None


class BrandCreate(ReferenceWrite):
    name: str = Field(min_length=1, max_length=100)
    product_type_id: int
    description: Optional[str] = Field(None, max_length=500)
    logo_url: Optional[str] = Field(None, max_length=500)
    website: Optional[str] = Field(None, max_length=200)


class BrandUpdate(ReferenceWrite):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    product_type_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=500)
    logo_url: Optional[str] = Field(None, max_length=500)
    website: Optional[str] = Field(None, max_length=200)


class BrandRead(ReferenceRead):
    product_type_id: int
    product_type_name: str = ""
    logo_url: Optional[str] = None
    website: Optional[str] = None


class ModelCreate(ReferenceWrite):
    name: str = Field(min_length=1, max_length=150)
    brand_id: int
    # Derived from the brand when omitted; must match it when given
    product_type_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=1000)
    model_reference: Optional[str] = Field(None, max_length=50)
    release_year: Optional[int] = Field(None, ge=1970, le=2100)


class ModelUpdate(ReferenceWrite):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    brand_id: Optional[int] = None
    product_type_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=1000)
    model_reference: Optional[str] = Field(None, max_length=50)
    release_year: Optional[int] = Field(None, ge=1970, le=2100)


class ModelRead(ReferenceRead):
    product_type_id: int
    product_type_name: str = ""
    brand_id: int
    brand_name: str = ""
    model_reference: Optional[str] = None
    release_year: Optional[int] = None


class ColorCreate(ReferenceWrite):
    name: str = Field(min_length=1, max_length=50)
    hex_code: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    description: Optional[str] = Field(None, max_length=200)


class ColorUpdate(ReferenceWrite):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    hex_code: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    description: Optional[str] = Field(None, max_length=200)


class ColorRead(ReferenceRead):
    hex_code: Optional[str] = None


class ConditionCreate(ReferenceWrite):
    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    quality_percentage: int = Field(100, ge=0, le=100)


class ConditionUpdate(ReferenceWrite):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    quality_percentage: Optional[int] = Field(None, ge=0, le=100)


class ConditionRead(ReferenceRead):
    quality_percentage: int
