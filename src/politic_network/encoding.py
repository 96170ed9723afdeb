"""Query-string and JSON body encoding for request parameters."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode


def compact_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of ``params`` without ``None``-valued entries."""

    if not params:
        return {}
    return {key: value for key, value in params.items() if value is not None}


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_query_value(item) for item in value if item is not None]
    return value


def build_query_string(params: Mapping[str, Any] | None) -> str:
    """Encode ``params`` as ``?key=value&...``.

    Entries keep the mapping's iteration order. An empty mapping (after
    dropping ``None`` values) encodes to an empty string.
    """

    values = {key: _query_value(value) for key, value in compact_params(params).items()}
    if not values:
        return ""
    return "?" + urlencode(values, doseq=True)


def encode_json_body(params: Mapping[str, Any]) -> bytes:
    """Serialize ``params`` as a compact JSON object.

    Raises `TypeError` or `ValueError` when a value is not JSON-serializable.
    """

    return json.dumps(compact_params(params), separators=(",", ":"), allow_nan=False).encode("utf-8")
