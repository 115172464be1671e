"""Shared configuration for the sketch-to-Excalidraw conversion pipeline."""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")

# Maximum number of calls the validate-repair loop makes before giving up
MAX_REPAIR_ATTEMPTS = int(os.getenv("EXCALIDRAW_MAX_REPAIR_ATTEMPTS", "3"))

# Seconds allowed for a single generative call (timeouts count as transformation failures)
REQUEST_TIMEOUT = float(os.getenv("EXCALIDRAW_REQUEST_TIMEOUT", "300"))

OUTPUT_DIR = Path(os.getenv("EXCALIDRAW_OUTPUT_DIR", str(ROOT / "data" / "output")))

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# Fixed envelope of every generated scene document
DOCUMENT_TYPE = "excalidraw"
DOCUMENT_VERSION = 2
DOCUMENT_SOURCE = "https://excalidraw.com"
APP_STATE = {
    "gridSize": 20,
    "gridStep": 5,
    "gridModeEnabled": False,
    "viewBackgroundColor": "#ffffff",
}


def vision_deployment() -> str:
    """Return the model/deployment name used for the image-to-text stages."""
    return os.getenv("AZURE_OPENAI_DEPLOYMENT_NAME", "gpt-5.2-chat")


def repair_deployment() -> str:
    """Return the model/deployment name used by the validate-repair loop."""
    return os.getenv("EXCALIDRAW_REPAIR_DEPLOYMENT", "") or vision_deployment()


def output_filename(filename: str) -> str:
    """Map an uploaded image name to its Excalidraw file name (``board.v2.jpg`` -> ``board.excalidraw``)."""
    return f"{Path(filename).name.split('.')[0]}.excalidraw"
