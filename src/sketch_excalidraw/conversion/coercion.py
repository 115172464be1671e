"""Column-name to coercion-rule table and the coercion helpers behind each rule.

The intermediate CSV is schema-less: every cell arrives as a string.  This
module fixes how each known Excalidraw element field is turned into a typed
value.  Unknown columns fall through to PASSTHROUGH.
"""

import copy
import json
import math
from enum import Enum
from typing import Any


class CoercionRule(Enum):
    """How a raw cell string is turned into a typed element value."""

    NUMERIC = "numeric"
    BOOLEAN_LITERAL = "boolean_literal"
    STRUCTURED_LITERAL = "structured_literal"
    ENUM_REMAP = "enum_remap"
    PASSTHROUGH = "passthrough"


# ─── Field Vocabulary ────────────────────────────────────────────────────────

NUMERIC_FIELDS = (
    "width",
    "height",
    "x",
    "y",
    "angle",
    "strokeWidth",
    "roughness",
    "opacity",
    "fontSize",
    "seed",
    "version",
)

BOOLEAN_FIELDS = ("isDeleted",)

# Structured-literal fields and the value used when the literal does not parse
STRUCTURED_FALLBACKS: dict[str, Any] = {
    "points": [[0, 0]],
    "boundElements": [],
    "startBinding": None,
    "endBinding": None,
    "groupIds": [],
}

FONT_FAMILY_REMAP = {"20": "Arial"}

_RULES: dict[str, CoercionRule] = {
    **{name: CoercionRule.NUMERIC for name in NUMERIC_FIELDS},
    **{name: CoercionRule.BOOLEAN_LITERAL for name in BOOLEAN_FIELDS},
    **{name: CoercionRule.STRUCTURED_LITERAL for name in STRUCTURED_FALLBACKS},
    "fontFamily": CoercionRule.ENUM_REMAP,
}


def rule_for(column: str) -> CoercionRule:
    """Return the coercion rule for *column* (PASSTHROUGH for anything unrecognised)."""
    return _RULES.get(column, CoercionRule.PASSTHROUGH)


def structured_fallback(column: str) -> Any:
    """Return a fresh copy of the fallback value for a structured-literal column."""
    return copy.deepcopy(STRUCTURED_FALLBACKS[column])


# ─── Coercion Helpers ────────────────────────────────────────────────────────


def parse_number(raw: str) -> int | float | None:
    """Parse a numeric cell, returning None when it is not a finite number.

    Integral values come back as ``int`` so the serialised document reads
    ``10`` rather than ``10.0``.
    """
    text = raw.strip()
    if not text or "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def coerce_number(raw: str) -> int | float:
    """Numeric rule: any unparsable or non-finite input becomes ``0``."""
    value = parse_number(raw)
    return 0 if value is None else value


def coerce_boolean(raw: str) -> bool:
    """Boolean rule: only the exact lowercase literal ``true`` is true."""
    return raw == "true"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def strict_loads(text: str) -> Any:
    """``json.loads`` that also rejects the non-standard NaN, Infinity and -Infinity tokens."""
    return json.loads(text, parse_constant=_reject_constant)


def parse_structured_literal(raw: str) -> Any:
    """Parse an embedded JSON literal written with single or double quotes.

    Raises ValueError when the text is not valid JSON after single quotes are
    normalised to double quotes.
    """
    return strict_loads(raw.replace("'", '"'))


def remap_font_family(raw: str) -> str:
    """Enum-remap rule for ``fontFamily``; unmapped values pass through."""
    return FONT_FAMILY_REMAP.get(raw, raw)


def reparse_quoted(raw: str) -> tuple[Any, bool]:
    """Passthrough rule with opportunistic re-parse of quoted content.

    Returns ``(value, fell_back)``.  Cells without a double quote pass
    through untouched.  Cells with one are parsed as a structured literal; if
    that fails the quote characters are stripped and ``fell_back`` is True.
    """
    if '"' not in raw:
        return raw, False
    try:
        return parse_structured_literal(raw), False
    except ValueError:
        return raw.replace('"', ""), True
