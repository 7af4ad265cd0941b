import math
import re
from datetime import date

from dealership.errors import ValidationError

AADHAR_RE = re.compile(r"[0-9]{12}")
MIN_YEAR = 1900

BIKE_TEXT_FIELDS = {
    "bike_name": "bikeName",
    "registration_number": "registrationNumber",
    "owner_phone": "ownerPhone",
    "owner_aadhar": "ownerAadhar",
    "owner_address": "ownerAddress",
}
BIKE_PRICE_FIELDS = {
    "purchase_price": "purchasePrice",
    "selling_price": "sellingPrice",
}
CUSTOMER_TEXT_FIELDS = {
    "customer_name": "customerName",
    "customer_email": "customerEmail",
    "customer_phone": "customerPhone",
    "customer_aadhar": "customerAadhar",
    "customer_address": "customerAddress",
}


def is_valid_aadhar(value) -> bool:
    return isinstance(value, str) and AADHAR_RE.fullmatch(value) is not None


def require_aadhar(value, field: str) -> str:
    if not is_valid_aadhar(value):
        raise ValidationError(f"{field} must be exactly 12 digits", field=field)
    return value


def require_text(value, field: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(f"{field} is required", field=field)
    return text


def require_price(value, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        price = float(value)
    except OverflowError:
        price = math.inf
    if not math.isfinite(price):
        raise ValidationError(f"{field} must be a finite number", field=field)
    if price < 0:
        raise ValidationError(f"{field} must be >= 0", field=field)
    return price


def max_year() -> int:
    return date.today().year + 1


def require_year(value, field: str = "year") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    if not MIN_YEAR <= value <= max_year():
        raise ValidationError(f"{field} must be between {MIN_YEAR} and {max_year()}", field=field)
    return value


def require_month(value, field: str = "month") -> int:
    """Months are 0-based: 0 is January, 11 is December."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 11:
        raise ValidationError(f"{field} must be between 0 and 11", field=field)
    return value


def clean_bike(fields: dict) -> dict:
    """Validate a complete set of bike fields (snake_case keys) and return them normalized."""
    cleaned = dict(fields)
    for key, label in BIKE_TEXT_FIELDS.items():
        cleaned[key] = require_text(fields.get(key), label)
    require_aadhar(cleaned["owner_aadhar"], "ownerAadhar")
    cleaned["year"] = require_year(fields.get("year"))
    for key, label in BIKE_PRICE_FIELDS.items():
        cleaned[key] = require_price(fields.get(key), label)
    return cleaned


def clean_sale_input(fields: dict) -> dict:
    cleaned = dict(fields)
    for key, label in CUSTOMER_TEXT_FIELDS.items():
        cleaned[key] = require_text(fields.get(key), label)
    require_aadhar(cleaned["customer_aadhar"], "customerAadhar")
    cleaned["sale_price"] = require_price(fields.get("sale_price"), "salePrice")
    return cleaned
