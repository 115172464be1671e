"""Four-stage image-to-Excalidraw pipeline.

Stages run strictly in order, each consuming the previous stage's output::

    imageToCsv -> validateCsv -> csvToExcalidraw -> validateExcalidraw

Only the last stage retries (internally, via the validate-repair loop).  Any
classified failure ends the run immediately in the ``failed`` state, tagged
with the stage it came from; the caller never sees a partial document.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sketch_excalidraw.config import output_filename
from sketch_excalidraw.conversion.document import assemble_document
from sketch_excalidraw.conversion.errors import ConversionError, MissingInput
from sketch_excalidraw.conversion.repair import validate_and_repair
from sketch_excalidraw.conversion.schema import SceneDocument
from sketch_excalidraw.conversion.transforms import ImagePayload, ImageTextTransform, RepairTransform
from sketch_excalidraw.prompts import IMAGE_TO_CSV_INSTRUCTION, SELF_REVIEW_CONTEXT_INSTRUCTION, SELF_REVIEW_INSTRUCTION

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Pipeline stages, in execution order."""

    IMAGE_TO_CSV = "imageToCsv"
    VALIDATE_CSV = "validateCsv"
    CSV_TO_EXCALIDRAW = "csvToExcalidraw"
    VALIDATE_EXCALIDRAW = "validateExcalidraw"


class RunStatus(str, Enum):
    """Terminal state of a pipeline run.  SUSPENDED is reserved and never entered."""

    SUCCESS = "success"
    FAILED = "failed"
    SUSPENDED = "suspended"


@dataclass(frozen=True)
class ConversionRequest:
    """One image to convert and the name it was uploaded under."""

    filename: str
    image: ImagePayload | None


@dataclass
class StepRecord:
    """Outcome of a single stage within a run."""

    status: str = "running"
    duration_s: float = 0.0
    error: str | None = None


@dataclass
class PipelineResult:
    """Terminal state of one run: the final document, or the failing stage and its error."""

    status: RunStatus
    filename: str
    contents: dict[str, Any] | None = None
    failed_stage: PipelineStage | None = None
    error: ConversionError | None = None
    steps: dict[str, StepRecord] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready summary in the workflow-trigger response shape."""
        return {
            "status": self.status.value,
            "result": {"filename": self.filename, "contents": self.contents} if self.succeeded else None,
            "error": str(self.error) if self.error is not None else None,
            "failedStage": self.failed_stage.value if self.failed_stage is not None else None,
            "steps": {stage: {"status": rec.status, "duration": round(rec.duration_s, 3), "error": rec.error} for stage, rec in self.steps.items()},
        }


# step:start / step:complete / step:error
StageEventHandler = Callable[[str, PipelineStage, StepRecord], None]


# ─── Stages ──────────────────────────────────────────────────────────────────


def image_to_csv(request: ConversionRequest, transform: ImageTextTransform) -> str:
    """Stage 1: ask the vision model for a CSV description of the drawing."""
    if not request.filename or request.image is None or not request.image.data:
        raise MissingInput("Missing required image data")
    turns = [{"role": "user", "content": IMAGE_TO_CSV_INSTRUCTION}]
    return transform.generate(request.image, turns)


def validate_csv(request: ConversionRequest, csv_text: str, transform: ImageTextTransform) -> str:
    """Stage 2: have the vision model review its own CSV and add missed elements."""
    if not csv_text or not csv_text.strip():
        raise MissingInput("Missing required CSV data")
    if request.image is None or not request.image.data:
        raise MissingInput("Missing required image data")
    turns = [
        {"role": "user", "content": SELF_REVIEW_CONTEXT_INSTRUCTION},
        {"role": "assistant", "content": csv_text},
        {"role": "user", "content": SELF_REVIEW_INSTRUCTION},
    ]
    return transform.generate(request.image, turns)


def csv_to_excalidraw(csv_text: str) -> SceneDocument:
    """Stage 3: deterministic CSV-to-document assembly."""
    if not csv_text:
        raise MissingInput("Missing required CSV data")
    return assemble_document(csv_text)


# ─── Controller ──────────────────────────────────────────────────────────────


def run_pipeline(
    request: ConversionRequest,
    image_transform: ImageTextTransform,
    repair_transform: RepairTransform,
    *,
    max_repair_attempts: int | None = None,
    on_event: StageEventHandler | None = None,
) -> PipelineResult:
    """Run all four stages and classify the terminal state.

    Classified failures (``ConversionError``) produce a ``failed`` result;
    anything else is a bug and propagates to the caller.
    """
    result = PipelineResult(status=RunStatus.SUCCESS, filename=output_filename(request.filename or "drawing"))

    stages: list[tuple[PipelineStage, Callable[[Any], Any]]] = [
        (PipelineStage.IMAGE_TO_CSV, lambda _: image_to_csv(request, image_transform)),
        (PipelineStage.VALIDATE_CSV, lambda csv_text: validate_csv(request, csv_text, image_transform)),
        (PipelineStage.CSV_TO_EXCALIDRAW, csv_to_excalidraw),
        (PipelineStage.VALIDATE_EXCALIDRAW, lambda doc: validate_and_repair(doc, repair_transform, max_attempts=max_repair_attempts)),
    ]

    def _emit(event_type: str, stage: PipelineStage, record: StepRecord) -> None:
        if on_event is not None:
            on_event(event_type, stage, record)

    value: Any = request
    for stage, step in stages:
        record = StepRecord()
        result.steps[stage.value] = record
        logger.info("Step %s started", stage.value)
        _emit("step:start", stage, record)

        t0 = time.time()
        try:
            value = step(value)
        except ConversionError as exc:
            record.status = "failed"
            record.duration_s = time.time() - t0
            record.error = str(exc)
            result.status = RunStatus.FAILED
            result.failed_stage = stage
            result.error = exc
            logger.error("Step %s failed after %.1fs: %s", stage.value, record.duration_s, exc)
            _emit("step:error", stage, record)
            return result

        record.status = "success"
        record.duration_s = time.time() - t0
        logger.info("Step %s completed (%.1fs)", stage.value, record.duration_s)
        _emit("step:complete", stage, record)

    result.contents = value
    return result
