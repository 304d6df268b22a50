"""DTOs and validation for the calculate shipping module."""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


def only_digits(v: Any) -> str:
    """Strip everything but digits (CEP as typed by the customer or merchant)."""
    if v is None:
        return ""
    return "".join(c for c in str(v).strip() if c.isdigit())


def optional_float(v: Any) -> Optional[float]:
    """Blank or unparseable admin fields count as unset."""
    if v is None or isinstance(v, bool):
        return None
    try:
        value = float(v)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def optional_str(v: Any) -> Optional[str]:
    if v is None or isinstance(v, (dict, list)):
        return None
    value = str(v).strip()
    return value or None


# --- Entrada (params) ---

class Measure(BaseModel):
    value: Optional[float] = None
    unit: Optional[str] = None


class Dimensions(BaseModel):
    height: Optional[Measure] = None
    width: Optional[Measure] = None
    length: Optional[Measure] = None


class CartItem(BaseModel):
    """Cart item as sent by the platform; unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    sku: Optional[str] = None
    product_id: Optional[str] = None
    quantity: int = Field(default=1, ge=1)
    price: float = 0.0
    final_price: Optional[float] = None
    weight: Optional[Measure] = None
    dimensions: Optional[Dimensions] = None

    @field_validator("sku", "product_id", mode="before")
    @classmethod
    def coerce_str(cls, v):
        return str(v) if v is not None else None

    @property
    def unit_price(self) -> float:
        return self.final_price if self.final_price is not None else self.price


class Address(BaseModel):
    model_config = ConfigDict(extra="allow")

    zip: str

    @field_validator("zip", mode="before")
    @classmethod
    def coerce_zip(cls, v):
        if v is None:
            raise ValueError("zip é obrigatório no endereço")
        return str(v)


class ShippingParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[Address] = Field(default=None, alias="from")
    to: Optional[Address] = None
    items: Optional[List[CartItem]] = None
    is_checkout_confirmation: bool = False


class Application(BaseModel):
    data: Optional[Dict[str, Any]] = None
    hidden_data: Optional[Dict[str, Any]] = None


class CalculateShippingInput(BaseModel):
    params: ShippingParams
    application: Application = Field(default_factory=Application)


# --- Opções do lojista ---

class ZipRange(BaseModel):
    min: Optional[str] = None
    max: Optional[str] = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def normalize_bound(cls, v):
        digits = only_digits(v)
        return digits or None


class FreeShippingRule(BaseModel):
    zip_range: Optional[ZipRange] = None
    min_amount: Optional[float] = None
    product_ids: Optional[List[str]] = None
    all_product_ids: bool = False

    @field_validator("product_ids", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        if isinstance(v, list):
            return [str(i) for i in v if i is not None]
        return v

    @field_validator("min_amount", mode="before")
    @classmethod
    def coerce_min_amount(cls, v):
        return optional_float(v)


class MerchantOptions(BaseModel):
    """Public app data merged with hidden data; immutable once built."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    apikey: Optional[str] = None
    free_shipping_from_value: Optional[float] = None
    free_shipping_rules: List[Optional[FreeShippingRule]] = Field(default_factory=list)
    additional_price: Optional[float] = None
    label: Optional[str] = None
    posting_deadline: Optional[Dict[str, Any]] = None
    zip: Optional[str] = None

    @classmethod
    def merge(cls, data: Optional[dict], hidden_data: Optional[dict]) -> "MerchantOptions":
        """Shallow merge: hidden_data keys override data keys."""
        return cls.model_validate({**(data or {}), **(hidden_data or {})})

    @field_validator("free_shipping_rules", mode="before")
    @classmethod
    def valid_rules(cls, v):
        """Malformed rules are dropped; the others keep their order."""
        if not isinstance(v, list):
            return []
        rules = []
        for entry in v:
            if not isinstance(entry, dict):
                continue
            try:
                rules.append(FreeShippingRule.model_validate(entry))
            except ValidationError:
                continue
        return rules

    @field_validator("free_shipping_from_value", "additional_price", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return optional_float(v)

    @field_validator("apikey", "label", "zip", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return optional_str(v)

    @field_validator("posting_deadline", mode="before")
    @classmethod
    def deadline_as_dict(cls, v):
        return v if isinstance(v, dict) else None


# --- Resposta ---

class DeliveryTime(BaseModel):
    days: int
    working_days: bool = True


class Additional(BaseModel):
    tag: str
    label: str
    price: float


class ShippingLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Dict[str, Any] = Field(alias="from")
    to: Dict[str, Any]
    price: float
    total_price: float
    discount: float = 0
    delivery_time: DeliveryTime
    posting_deadline: Dict[str, Any]
    flags: List[str] = Field(default_factory=list)
    other_additionals: Optional[List[Additional]] = None


class ShippingService(BaseModel):
    label: str
    carrier: str
    service_name: str
    service_code: str
    shipping_line: ShippingLine


class CalculateShippingResponse(BaseModel):
    free_shipping_from_value: Optional[float] = None
    shipping_services: List[ShippingService] = Field(default_factory=list)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
