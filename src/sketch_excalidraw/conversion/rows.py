"""Turn one CSV data row into one Excalidraw element record.

Parsing is total: every rule in the coercion table has a fallback, so a
malformed cell degrades to a documented default instead of aborting the
batch.  Each substituted default is reported as a ``FieldCoercionFallback``.
"""

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from sketch_excalidraw.conversion.coercion import (
    CoercionRule,
    coerce_boolean,
    parse_number,
    parse_structured_literal,
    remap_font_family,
    reparse_quoted,
    rule_for,
    structured_fallback,
)
from sketch_excalidraw.conversion.errors import FieldCoercionFallback

logger = logging.getLogger(__name__)

TEXT_ELEMENT_TYPE = "text"

FallbackHandler = Callable[[FieldCoercionFallback], None]


def _now_ms() -> int:
    """Current instant as epoch milliseconds (Excalidraw's ``updated`` unit)."""
    return int(time.time() * 1000)


def _report(on_fallback: FallbackHandler | None, event: FieldCoercionFallback) -> None:
    logger.debug("Fallback for field '%s' (raw=%r): %s -> %r", event.field, event.raw, event.reason, event.fallback)
    if on_fallback is not None:
        on_fallback(event)


def coerce_cell(column: str, raw: str, on_fallback: FallbackHandler | None = None) -> Any:
    """Apply the coercion rule for *column* to a non-empty, trimmed cell."""
    rule = rule_for(column)

    if rule is CoercionRule.NUMERIC:
        value = parse_number(raw)
        if value is None:
            _report(on_fallback, FieldCoercionFallback(column, raw, 0, "not a finite number"))
            return 0
        return value

    if rule is CoercionRule.BOOLEAN_LITERAL:
        return coerce_boolean(raw)

    if rule is CoercionRule.STRUCTURED_LITERAL:
        try:
            return parse_structured_literal(raw)
        except ValueError as exc:
            fallback = structured_fallback(column)
            _report(on_fallback, FieldCoercionFallback(column, raw, fallback, f"invalid structured literal: {exc}"))
            return fallback

    if rule is CoercionRule.ENUM_REMAP:
        return remap_font_family(raw)

    value, fell_back = reparse_quoted(raw)
    if fell_back:
        _report(on_fallback, FieldCoercionFallback(column, raw, value, "quoted value is not a structured literal"))
    return value


def missing_cell_default(column: str, on_fallback: FallbackHandler | None = None) -> tuple[Any, bool]:
    """Value for a column the row has no cell for at all (row shorter than header).

    Returns ``(value, present)``.  Numeric, boolean and structured columns
    still resolve to their defaults; every other column stays absent.
    """
    rule = rule_for(column)
    if rule is CoercionRule.NUMERIC:
        value = 0
    elif rule is CoercionRule.BOOLEAN_LITERAL:
        value = False
    elif rule is CoercionRule.STRUCTURED_LITERAL:
        value = structured_fallback(column)
    else:
        return None, False
    _report(on_fallback, FieldCoercionFallback(column, "", value, "missing cell"))
    return value, True


def _apply_fixed_fields(element: dict[str, Any], now_ms: int) -> None:
    """Assert the fields every Excalidraw element needs regardless of row content."""
    element["frameId"] = element.get("frameId") or None
    element["updated"] = now_ms
    element["link"] = None
    element["locked"] = False

    if element.get("type") == TEXT_ELEMENT_TYPE:
        element["originalText"] = element.get("text", "")
        element["lineHeight"] = 1.25
        element["baseline"] = 0
        element["containerId"] = None
        element["autoResize"] = True

    # A structured parse can "succeed" with a bare string; these two must stay lists
    for field in ("groupIds", "boundElements"):
        if isinstance(element.get(field), str):
            element[field] = []


def parse_row(
    header: Sequence[str],
    row: Sequence[str],
    *,
    now_ms: int | None = None,
    on_fallback: FallbackHandler | None = None,
) -> dict[str, Any]:
    """Build one element record from a header and a data row.

    Columns whose cell is empty after trimming are omitted from the record.
    Columns past the end of a short row get their rule's default, or are
    omitted when the rule has none.  ``now_ms`` pins the ``updated``
    timestamp; by default the clock is read at call time.
    """
    element: dict[str, Any] = {}
    for index, column in enumerate(header):
        if index >= len(row):
            value, present = missing_cell_default(column, on_fallback)
            if present:
                element[column] = value
            continue
        raw = row[index].strip()
        if raw == "":
            continue
        element[column] = coerce_cell(column, raw, on_fallback)

    _apply_fixed_fields(element, _now_ms() if now_ms is None else now_ms)
    return element
