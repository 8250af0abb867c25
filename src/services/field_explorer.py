"""Flattening of arbitrary JSON responses into selectable widget fields."""

import json
from dataclasses import asdict, dataclass
from typing import Any, Literal

DisplayMode = Literal["card", "table", "chart"]
FieldType = Literal["string", "number", "boolean", "object", "array", "null"]


@dataclass
class FlattenedField:
    """A single dotted path in a JSON document and a preview of its value."""

    path: str
    value: Any
    type: FieldType
    is_nested_array: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def get_value_by_path(obj: Any, path: str) -> Any:
    """
    Walk a dotted path through dicts and lists.

    Args:
        obj: Parsed JSON document
        path: Dotted path such as "quote.c" or "values.0.close"

    Returns:
        The value at the path, or None when any segment is missing
    """
    current = obj
    for key in path.split("."):
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return None
    return current


def _field_type(value: Any) -> FieldType:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


def _is_nested_array(value: list) -> bool:
    return (
        len(value) > 0
        and isinstance(value[0], dict)
        and any(isinstance(item, list) for item in value[0].values())
    )


def flatten_fields(obj: Any, prefix: str = "") -> list[FlattenedField]:
    """
    Flatten a JSON object into a depth-first list of fields.

    Objects contribute a "{...}" container entry followed by their children.
    Nested arrays are not descended into; they contribute one entry with an
    "[N items]" preview. A top-level array is walked by index, so a list
    response yields paths like "0.name".
    """
    fields: list[FlattenedField] = []
    if isinstance(obj, dict):
        items = obj.items()
    elif isinstance(obj, list):
        items = enumerate(obj)
    else:
        return fields

    for key, value in items:
        path = f"{prefix}.{key}" if prefix else str(key)
        field_type = _field_type(value)

        if field_type == "array":
            preview = f"[{len(value)} items]" if value else "[]"
            fields.append(
                FlattenedField(path, preview, "array", is_nested_array=_is_nested_array(value))
            )
        elif field_type == "object":
            fields.append(FlattenedField(path, "{...}", "object"))
            fields.extend(flatten_fields(value, path))
        else:
            fields.append(FlattenedField(path, value, field_type))

    return fields


def _array_item_fields(obj: Any, array_path: str) -> list[FlattenedField]:
    array_data = get_value_by_path(obj, array_path)
    if not isinstance(array_data, list) or not array_data:
        return []
    return flatten_fields(array_data[0])


def select_fields(
    obj: Any,
    mode: DisplayMode = "card",
    array_path: str | None = None,
    search: str | None = None,
) -> list[FlattenedField]:
    """
    List the fields a widget in the given display mode can pick from.

    Args:
        obj: Parsed JSON response
        mode: "card" lists primitive leaves, "table" lists arrays (or the
            columns of the array at array_path), "chart" lists nothing
        array_path: Array chosen as the table's row source
        search: Case-insensitive filter over path and value

    Returns:
        Matching fields, object containers excluded
    """
    if mode == "card":
        fields = [f for f in flatten_fields(obj) if f.type not in ("array", "object")]
    elif mode == "table":
        if array_path:
            fields = _array_item_fields(obj, array_path)
        else:
            fields = [f for f in flatten_fields(obj) if f.type == "array"]
    else:
        fields = []

    fields = [f for f in fields if f.type != "object"]

    if search:
        term = search.lower()
        fields = [
            f for f in fields if term in f.path.lower() or term in _display(f.value).lower()
        ]

    return fields


def _display(value: Any) -> str:
    # Matches how a browser stringifies JSON scalars
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def default_label(path: str) -> str:
    """Label a field by its last path segment, first letter capitalized."""
    label = path.split(".")[-1] or path
    return label[:1].upper() + label[1:]


def format_value(value: Any, field_type: str | None = None) -> str:
    """Render a field value for display in a card or table cell."""
    if value is None:
        return "N/A"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if field_type == "number" or isinstance(value, (int, float)):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return str(value)
        if number.is_integer():
            return f"{int(number):,}"
        return f"{number:,.3f}".rstrip("0").rstrip(".")
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def extract_rows(obj: Any, array_path: str | None = None) -> list[Any]:
    """
    Rows for a table widget.

    Uses the array at array_path when it exists, otherwise the response
    itself when it is a list.
    """
    if array_path:
        rows = get_value_by_path(obj, array_path)
        if isinstance(rows, list):
            return rows
    if isinstance(obj, list):
        return obj
    return []
