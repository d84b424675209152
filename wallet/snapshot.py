"""Export and import of the whole wallet state as one JSON document."""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any, Callable, Dict, Tuple, Union

from wallet.domain import Category, Goal, Transaction, WalletState
from wallet.functional import Either, Left, Right
from wallet.logging_setup import get_logger

logger = get_logger("wallet.snapshot")


class InvalidFormat(ValueError):
    """Raised when an imported document cannot be read back into state."""


def serialize(state: WalletState) -> bytes:
    return json.dumps(state.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")


def _records(items: Any, build: Callable[[dict], Any]) -> Tuple[Any, ...]:
    return tuple(build(item) for item in items)


_FIELD_BUILDERS: Dict[str, Callable[[Any], Any]] = {
    "income": lambda value: value,
    "categories": lambda value: _records(value, Category.from_dict),
    "transactions": lambda value: _records(value, Transaction.from_dict),
    "goals": lambda value: _records(value, Goal.from_dict),
}


def deserialize(data: Union[bytes, str], current: WalletState) -> WalletState:
    """Read an exported document back into a ``WalletState``.

    Keys missing from the document (or set to ``null``) keep the value
    from ``current``.  Values are otherwise taken as they are; nothing
    beyond building the records is validated.

    Raises:
        InvalidFormat: the document cannot be decoded or parsed as JSON,
            its top level is not an object, or one of its record lists
            cannot be built.
    """
    try:
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        parsed = json.loads(text)
    except (ValueError, RecursionError) as e:
        # bad UTF-8, bad JSON, oversized numbers, deep nesting
        raise InvalidFormat(f"Invalid file: {e}") from e

    if not isinstance(parsed, dict):
        raise InvalidFormat(f"Invalid file: expected an object, got {type(parsed).__name__}")

    updates = {}
    for key, build in _FIELD_BUILDERS.items():
        value = parsed.get(key)
        if value is None:
            continue
        try:
            updates[key] = build(value)
        except (KeyError, TypeError, AttributeError) as e:
            raise InvalidFormat(f"Invalid file: bad {key!r} entry ({e})") from e

    logger.debug("imported fields: %s", sorted(updates))
    return replace(current, **updates)


def safe_import(data: Union[bytes, str], current: WalletState) -> Either[dict, WalletState]:
    try:
        return Right(deserialize(data, current))
    except InvalidFormat as e:
        return Left({
            "error": "invalid_format",
            "message": str(e),
        })
