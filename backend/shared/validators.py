"""String-list parsing for client and relay settings.

List settings (relay CORS origins, client Socket.IO transports) come from the
environment either as a JSON array or as a comma-separated string.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic_settings import EnvSettingsSource

if TYPE_CHECKING:
    from collections.abc import Collection

    from pydantic.fields import FieldInfo


def _split(value: str) -> list[str]:
    stripped = value.strip()
    if not stripped:
        raise ValueError("String list value must not be empty")
    if not stripped.startswith("["):
        return [item.strip() for item in stripped.split(",") if item.strip()]
    try:
        parsed = json.loads(stripped)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON array: {e}") from e
    if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
        raise ValueError("JSON value must be an array of strings")
    return parsed


def parse_string_list(
    value: str | list[str],
    *,
    allow_empty: bool = False,
    allowed: Collection[str] | None = None,
) -> list[str]:
    """Parse a list setting given as a list, a JSON array string or a CSV string.

    Raises ValueError for a blank string, malformed JSON, an empty result
    (unless allow_empty) or an item outside allowed.
    """
    items = value if isinstance(value, list) else _split(value)
    if not allow_empty and not items:
        raise ValueError("String list value must not be empty")
    if allowed is not None:
        unknown = [item for item in items if item not in allowed]
        if unknown:
            raise ValueError(f"Unsupported value(s) {unknown}; expected any of {sorted(allowed)}")
    return items


class StringListEnvSettingsSource(EnvSettingsSource):
    """Env source that hands list[str] fields to their validators as raw strings.

    pydantic-settings JSON-decodes complex fields before validation, which
    rejects the CSV form. Every list[str] field is passed through untouched so
    its parse_string_list validator sees the original text.
    """

    def prepare_field_value(
        self,
        field_name: str,
        field: FieldInfo,
        value: Any,  # noqa: ANN401
        value_is_complex: bool,  # noqa: FBT001
    ) -> Any:  # noqa: ANN401
        if isinstance(value, str) and field.annotation == list[str]:
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)
