"""
Input parsing and validation helpers used at the request boundary.
"""

from typing import Any, Iterable, List, Mapping, Optional
import json
import math

from propertyhub.utils.exceptions import MissingFieldsError, ValidationError

TRUE_VALUES = {"true", "1", "yes", "on"}
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


def parse_number(value: Any) -> Optional[float]:
    """
    Lenient numeric parsing.

    Returns None for absent, blank, non-numeric and non-finite input so that
    callers can drop the value instead of comparing against NaN.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_int(value: Any) -> Optional[int]:
    """Lenient integer parsing; values outside the INTEGER column range are dropped."""
    number = parse_number(value)
    if number is None or not INT_MIN <= number <= INT_MAX:
        return None
    return int(number)


def parse_bool(value: Any) -> Optional[bool]:
    """None when absent; otherwise true only for the usual truthy spellings."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_required_fields(data: Mapping[str, Any], required: Iterable[str]) -> List[str]:
    return [field for field in required if is_blank(data.get(field))]


def require_fields(data: Mapping[str, Any], required: Iterable[str]) -> None:
    """
    Raise MissingFieldsError listing every required field that is absent or blank.

    Args:
        data: Submitted fields keyed by their public name
        required: Public names of the required fields

    Raises:
        MissingFieldsError: If any field is missing
    """
    missing = missing_required_fields(data, required)
    if missing:
        raise MissingFieldsError(missing)


def parse_json_list(value: Any, field: str) -> Optional[List[Any]]:
    """Decode a JSON array submitted as a form field."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, list):
        return value
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a JSON array")
    if not isinstance(decoded, list):
        raise ValidationError(f"{field} must be a JSON array")
    return decoded


def parse_string_list(value: Any) -> List[str]:
    """Accept a JSON array or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    text = str(value).strip()
    if text.startswith("["):
        return [str(item).strip() for item in parse_json_list(text, "list") or [] if str(item).strip()]
    return [item.strip() for item in text.split(",") if item.strip()]
