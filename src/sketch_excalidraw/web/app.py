"""FastAPI server exposing the converter as a triggerable workflow.

Usage:
    python -m sketch_excalidraw.web.app
    # => Uvicorn running on http://localhost:4111

    POST /api/workflows/excalidraw-converter/trigger
    {"data": {"filename": "board.jpg", "file": "data:image/jpeg;base64,..."}}
"""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from sketch_excalidraw import config
from sketch_excalidraw.conversion.pipeline import ConversionRequest, run_pipeline
from sketch_excalidraw.conversion.transforms import ImagePayload
from sketch_excalidraw.llm.client import build_transforms

logger = logging.getLogger(__name__)

WORKFLOW_ID = "excalidraw-converter"

# Transforms are built on the first request so the app can start without credentials
_CACHE: dict = {
    "transforms": None,
}


def get_transforms():
    """Return the cached (image, repair) transform pair."""
    if _CACHE["transforms"] is None:
        _CACHE["transforms"] = build_transforms()
    return _CACHE["transforms"]


class TriggerData(BaseModel):
    """Workflow input: the uploaded file name and its image as a data URL or base64."""

    filename: str
    file: str


class TriggerRequest(BaseModel):
    data: TriggerData


app = FastAPI(title="Sketch to Excalidraw")


@app.get("/api/health")
async def health():
    return {"ok": True}


@app.post(f"/api/workflows/{WORKFLOW_ID}/trigger")
async def trigger(body: TriggerRequest):
    """Run the full conversion and return the workflow result (success or failed)."""
    if not body.data.filename or not body.data.file:
        raise HTTPException(status_code=400, detail="filename and file are required")
    try:
        image = ImagePayload.from_data_url(body.data.file)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    logger.info("Trigger: %s (%.2f KB)", body.data.filename, len(image.data) / 1024)
    image_transform, repair_transform = get_transforms()

    # Pipeline calls block on the network; keep them off the event loop
    result = await run_in_threadpool(
        run_pipeline,
        ConversionRequest(filename=body.data.filename, image=image),
        image_transform,
        repair_transform,
        max_repair_attempts=config.MAX_REPAIR_ATTEMPTS,
    )
    logger.info("Trigger: %s finished with status %s", body.data.filename, result.status.value)
    return result.to_dict()


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main():
    """Start the web server via uvicorn."""
    import uvicorn  # pylint: disable=import-outside-toplevel

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)
    uvicorn.run(app, host="0.0.0.0", port=4111)


if __name__ == "__main__":
    main()
