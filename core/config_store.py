"""
Key/value configuration for the module.

Values are stored as text, the way the admin form submits them. Readers
convert with as_bool / as_int / as_decimal.
"""

from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.orm import Session

from db.models import PaypalModuleConfig

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


def as_int(value: Any, default: int = 0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def as_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        return default


class DatabaseConfigStore:
    """ConfigStore backed by the paypal_module_config table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str, default: Any = None) -> Any:
        with self.session_factory() as session:
            row = session.get(PaypalModuleConfig, key)
            if row is None or row.value is None:
                return default
            return row.value

    def set(self, key: str, value: Any) -> None:
        with self.session_factory() as session:
            row = session.get(PaypalModuleConfig, key)
            if row is None:
                row = PaypalModuleConfig(name=key)
                session.add(row)
            row.value = _to_text(value)
            session.commit()


class MemoryConfigStore:
    """ConfigStore over a plain dict, for tests and embedded use."""

    def __init__(self, values: dict[str, Any] | None = None):
        self.values = {k: _to_text(v) for k, v in (values or {}).items()}

    def get(self, key: str, default: Any = None) -> Any:
        value = self.values.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        self.values[key] = _to_text(value)
