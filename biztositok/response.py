"""
Response wrapper for decoded API replies
"""

import re
from collections.abc import Iterator, Mapping
from typing import Any

from .logging_config import get_module_logger

logger = get_module_logger("response")

_MISSING = object()

# Decimal or exponent notation with optional surrounding whitespace, ASCII only
_NUMERIC_STRING = re.compile(r"\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*", re.ASCII)


class Response(Mapping):
    """
    Read-only view of a decoded API response

    The API replies with a JSON object that usually holds ``success``,
    ``message`` and ``errors`` (a list of ``{field, error_message}``) next to
    the function specific data. Any other JSON value, including null, is
    accepted and simply has no keys.

    Values can be read with dotted paths::

        response.get("user.address.zip")
        response["user"]["address"]["zip"]
    """

    def __init__(self, payload: Any):
        """
        Args:
            payload: The decoded JSON value returned by the API
        """
        self._payload = payload

    @property
    def payload(self) -> Any:
        """The decoded response exactly as returned by the API."""
        return self._payload

    def is_success(self) -> bool:
        """Whether the API reported success (``success`` loosely equal to 1)."""
        value = self._lookup(self._payload, "success")
        if value is _MISSING:
            return False
        return _loosely_equals_one(value)

    def message(self) -> str:
        """The status message, or an empty string."""
        value = self._lookup(self._payload, "message")
        if isinstance(value, str):
            return value
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return ""

    def errors(self) -> list[dict[str, Any]]:
        """
        The reported errors.

        Returns:
            List of dicts with the keys ``field`` and ``error_message``,
            empty if there are no errors. Errors sent as an object (keyed by
            field name) are returned in the object's order.
        """
        value = self._lookup(self._payload, "errors")
        if isinstance(value, list):
            return value
        if isinstance(value, dict):
            return list(value.values())
        return []

    def error_messages(self) -> list[str]:
        """The ``error_message`` of every error, in order."""
        return [_text(row.get("error_message")) for row in self._error_rows()]

    def errors_combined(self) -> list[str]:
        """Every error as ``"[<field>]: <error_message>"``, in order."""
        return [
            f"[{_text(row.get('field'))}]: {_text(row.get('error_message'))}"
            for row in self._error_rows()
        ]

    def _error_rows(self) -> list[dict[str, Any]]:
        return [row for row in self.errors() if isinstance(row, dict)]

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a value by key or dotted path.

        A key that literally exists at the current level wins over splitting it
        on dots, so ``{"a.b": 1, "a": {"b": 2}}`` gives 1 for ``"a.b"``.
        Lists can be indexed with numbers (``"items.0.name"``).

        Args:
            key: Key of the element, dots separate nesting levels
                 (e.g. ``"user.address.zip"``)
            default: Returned when the path does not resolve or its value is null

        Returns:
            The value at the path, or default
        """
        node = self._payload
        remaining = key

        while True:
            value = self._lookup(node, remaining)
            if value is not _MISSING:
                return value

            head, separator, remaining = remaining.partition(".")
            if not separator:
                return default

            node = self._lookup(node, head)
            if not isinstance(node, dict | list):
                return default

    def has(self, key: Any) -> bool:
        """Whether a top-level key exists with a non-null value."""
        return self._lookup(self._payload, key) is not _MISSING

    @staticmethod
    def _lookup(node: Any, key: Any) -> Any:
        """Direct lookup in a dict or list; null values count as missing."""
        if isinstance(node, dict):
            value = node.get(key, _MISSING)
        elif isinstance(node, list):
            index = _list_index(key)
            value = node[index] if index is not None and index < len(node) else _MISSING
        else:
            return _MISSING

        return _MISSING if value is None else value

    # Mapping interface

    def __getitem__(self, key: Any) -> Any:
        value = self._lookup(self._payload, key)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator:
        return iter(self._keys())

    def __len__(self) -> int:
        return len(self._keys())

    def _keys(self) -> list:
        # Same visibility as has(): keys holding null are skipped
        if isinstance(self._payload, dict):
            return [key for key, value in self._payload.items() if value is not None]
        if isinstance(self._payload, list):
            return [index for index, value in enumerate(self._payload) if value is not None]
        return []

    # Writes are accepted for compatibility with code treating the response as
    # a plain dict, but the wrapped payload never changes.

    def __setitem__(self, key: Any, value: Any) -> None:
        logger.debug(f"Ignoring write of key {key!r} on read-only response")

    def __delitem__(self, key: Any) -> None:
        logger.debug(f"Ignoring delete of key {key!r} on read-only response")

    def __repr__(self) -> str:
        return f"Response({self._payload!r})"


def _list_index(key: Any) -> int | None:
    """Parse a canonical, non-negative list index (``"0"``, ``"12"``, or an int)."""
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key if key >= 0 else None
    if isinstance(key, str) and key.isascii() and key.isdigit() and key == str(int(key)):
        return int(key)
    return None


def _loosely_equals_one(value: Any) -> bool:
    """Numeric comparison with 1 that also accepts numeric strings like "1" or "1.0"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value == 1
    if isinstance(value, str):
        if not _NUMERIC_STRING.fullmatch(value):
            return False
        return float(value) == 1
    return False


def _text(value: Any) -> str:
    """String form of an error field; null becomes an empty string."""
    return "" if value is None else str(value)
