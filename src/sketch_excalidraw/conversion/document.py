"""Assemble the intermediate CSV text into an Excalidraw scene document.

Each non-empty line after the header becomes exactly one element, in input
order.  The only way this stage fails is the structural precondition: a
header plus at least one data row.
"""

import csv
import logging
from collections import Counter

from sketch_excalidraw.conversion.errors import FieldCoercionFallback, InsufficientData
from sketch_excalidraw.conversion.rows import parse_row
from sketch_excalidraw.conversion.schema import SceneDocument

logger = logging.getLogger(__name__)

_CODE_FENCE = "```"


def split_table_lines(text: str) -> list[str]:
    """Split CSV text into trimmed, non-empty lines, dropping markdown code fences."""
    # Only "\n" ends a row; other Unicode line breaks may sit inside a text cell
    lines = (line.strip() for line in text.split("\n"))
    return [line for line in lines if line and not line.startswith(_CODE_FENCE)]


def split_cells(line: str) -> list[str]:
    """Tokenise one CSV line into trimmed cells.

    Unquoted cells split on every comma.  A cell wrapped in double quotes may
    contain commas; the surrounding quotes are consumed by the CSV reader.
    """
    try:
        cells = next(csv.reader([line], skipinitialspace=True), [])
    except csv.Error as exc:
        logger.debug("CSV reader rejected line (%s); splitting on commas", exc)
        cells = line.split(",")
    return [cell.strip() for cell in cells]


def assemble_document(text: str, *, now_ms: int | None = None) -> SceneDocument:
    """Parse the full intermediate CSV into a SceneDocument.

    Raises InsufficientData when fewer than two usable lines remain after
    trimming.  ``now_ms`` pins every element's ``updated`` timestamp.
    """
    lines = split_table_lines(text)
    if len(lines) < 2:
        raise InsufficientData(f"CSV must have header row and at least one data row (got {len(lines)} usable lines)")

    header = split_cells(lines[0])
    fallbacks: list[FieldCoercionFallback] = []
    elements = [parse_row(header, split_cells(line), now_ms=now_ms, on_fallback=fallbacks.append) for line in lines[1:]]

    type_counts = Counter(str(element.get("type", "unknown")) for element in elements)
    logger.info(
        "Assembled %d elements from %d columns (%d field fallbacks): %s",
        len(elements),
        len(header),
        len(fallbacks),
        dict(type_counts),
    )
    return SceneDocument(elements=elements)
