"""JSON values to and from Firestore REST typed values.

Document values are JSON, so only null, bool, number, string, array and
string-keyed map are accepted. Anything else is rejected on the way out
(TypeError) and on the way in (ValueError); the driver reports both as
driver errors.
"""

from typing import Any

from docsync.domain.entities import JSONValue


def encode_value(value: JSONValue) -> dict[str, Any]:
    """One JSON value as a Firestore typed value."""
    # bool before int: bool is an int subclass
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": _encode_fields(value)}}
    raise TypeError(f"Unsupported Firestore value type: {type(value).__name__}")


def _encode_fields(mapping: dict) -> dict[str, Any]:
    fields = {}
    for name, item in mapping.items():
        if not isinstance(name, str):
            raise TypeError(f"Map keys must be strings, got {type(name).__name__}")
        fields[name] = encode_value(item)
    return fields


def encode_document(data: dict[str, JSONValue]) -> dict[str, Any]:
    """Request body ({"fields": ...}) for a record dict."""
    return {"fields": _encode_fields(data)}


_SCALARS = {
    "booleanValue": lambda raw: raw,
    "integerValue": int,
    "doubleValue": float,
    "stringValue": lambda raw: raw,
}


def decode_value(typed: dict[str, Any]) -> JSONValue:
    """One Firestore typed value as a JSON value."""
    if "nullValue" in typed:
        return None
    if "arrayValue" in typed:
        return [decode_value(item) for item in typed["arrayValue"].get("values") or []]
    if "mapValue" in typed:
        return decode_document(typed["mapValue"].get("fields"))
    for kind, convert in _SCALARS.items():
        if kind in typed:
            return convert(typed[kind])
    raise ValueError(f"Unsupported Firestore value in response: {sorted(typed)}")


def decode_document(fields: dict[str, Any] | None) -> dict[str, JSONValue]:
    """Record dict for a Firestore 'fields' map (empty when absent)."""
    return {name: decode_value(typed) for name, typed in (fields or {}).items()}
