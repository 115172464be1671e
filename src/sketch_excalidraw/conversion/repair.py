"""Bounded validate-repair loop for the assembled Excalidraw document.

The repair collaborator is unreliable: it may wrap its answer in quotes,
escape it, or return something that is not JSON at all.  Each failed parse is
fed back verbatim in the next request, together with the model's own previous
answer, until a response parses as a JSON object or the attempt budget runs
out.

State machine::

    Attempting(1) -> ... -> Attempting(max_attempts)
         |                          |
         +--> Succeeded(document)   +--> Exhausted(last_error)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from sketch_excalidraw import config
from sketch_excalidraw.conversion.coercion import strict_loads
from sketch_excalidraw.conversion.errors import ValidationExhausted, ValidationParseError
from sketch_excalidraw.conversion.schema import SceneDocument
from sketch_excalidraw.conversion.transforms import RepairTransform, Turn
from sketch_excalidraw.prompts import REPAIR_CORRECTION_TEMPLATE, REPAIR_INSTRUCTION

logger = logging.getLogger(__name__)


@dataclass
class RetryState:
    """Mutable bookkeeping for one run of the loop; discarded when the loop exits."""

    attempt: int = 1
    turns: list[Turn] = field(default_factory=list)
    last_error: ValidationParseError | None = None


# ─── Response Cleanup ────────────────────────────────────────────────────────


def clean_response(text: str) -> str:
    """Undo the quoting the repair model tends to add around its JSON.

    Order is fixed: strip one pair of outer double quotes, then turn ``\\"``
    back into ``"``, then drop literal ``\\n`` sequences.
    """
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]
    return text.replace('\\"', '"').replace("\\n", "")


def parse_candidate(text: str) -> dict[str, Any]:
    """Clean a raw repair response and parse it as a JSON object.

    Raises ValidationParseError if the text is not strict JSON (NaN and
    Infinity are rejected) or not an object.
    """
    cleaned = clean_response(text)
    try:
        parsed = strict_loads(cleaned)
    except ValueError as exc:
        raise ValidationParseError(str(exc)) from exc
    if not isinstance(parsed, dict):
        raise ValidationParseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


# ─── Loop ────────────────────────────────────────────────────────────────────


def build_initial_turn(document: SceneDocument | dict[str, Any]) -> Turn:
    """The first request: instructions plus the serialised candidate document."""
    payload = document.to_dict() if isinstance(document, SceneDocument) else document
    return {"role": "user", "content": f"{REPAIR_INSTRUCTION}\n\n{json.dumps(payload)}"}


def validate_and_repair(
    document: SceneDocument | dict[str, Any],
    transform: RepairTransform,
    *,
    max_attempts: int | None = None,
) -> dict[str, Any]:
    """Drive *transform* until it returns a parseable JSON object.

    Makes at most ``max_attempts`` calls (default ``config.MAX_REPAIR_ATTEMPTS``).
    Returns the parsed document on success.  Raises ValidationExhausted once
    the budget is spent; TransformationFailure from the collaborator is not
    retried and propagates unchanged.
    """
    max_attempts = config.MAX_REPAIR_ATTEMPTS if max_attempts is None else max_attempts
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    state = RetryState(turns=[build_initial_turn(document)])

    while True:
        logger.info("Repair attempt %d/%d (%d turns)", state.attempt, max_attempts, len(state.turns))
        response = transform.generate(list(state.turns))

        try:
            parsed = parse_candidate(response)
        except ValidationParseError as exc:
            state.last_error = exc
            logger.warning("Validation attempt %d failed with error: %s", state.attempt, exc)
            if state.attempt >= max_attempts:
                raise ValidationExhausted(state.last_error, state.attempt) from exc

            state.turns.append({"role": "assistant", "content": response})
            state.turns.append({"role": "user", "content": REPAIR_CORRECTION_TEMPLATE.format(error=exc)})
            state.attempt += 1
            continue

        elements = parsed.get("elements")
        logger.info("Repair succeeded on attempt %d (%d elements)", state.attempt, len(elements) if isinstance(elements, list) else 0)
        return parsed
