"""Response field selection (the ``_fields`` query parameter)."""

from typing import Any


def parse_fields(fields: str | None) -> list[str] | None:
    """
    Parse a comma-separated ``_fields`` value.

    Returns:
        List of field selectors, or None when no selection was requested
    """
    if fields is None:
        return None
    return [field.strip() for field in fields.split(",") if field.strip()]


def filter_response_fields(data: dict[str, Any], fields: list[str]) -> dict[str, Any]:
    """
    Keep only the selected fields of a response.

    Selectors may address nested members with dots ("title.raw"). Fields that
    are not present are left out entirely.
    """
    result: dict[str, Any] = {}
    for field in fields:
        parts = field.split(".")

        source: Any = data
        for part in parts:
            if not isinstance(source, dict) or part not in source:
                break
            source = source[part]
        else:
            target = result
            for part in parts[:-1]:
                if not isinstance(target.get(part), dict):
                    target[part] = {}
                target = target[part]
            target[parts[-1]] = source

    return result
