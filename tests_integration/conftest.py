"""Integration test fixtures for the live conversion pipeline.

These tests call the configured vision and repair models, so they need
credentials in .env and a sample image.  Set EXCALIDRAW_SAMPLE_IMAGE to the
image path (defaults to data/samples/whiteboard.jpg).

Run with:  pytest tests_integration/ -v
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from sketch_excalidraw.llm.client import build_transforms

PROJECT_ROOT = Path(__file__).parent.parent.resolve()

load_dotenv(PROJECT_ROOT / ".env")


@pytest.fixture(scope="session")
def transforms():
    """Build the live transform pair once per session, skipping when no provider is configured."""
    try:
        return build_transforms()
    except RuntimeError as exc:
        pytest.skip(str(exc))


@pytest.fixture(scope="session")
def sample_image_path() -> Path:
    path = Path(os.getenv("EXCALIDRAW_SAMPLE_IMAGE", str(PROJECT_ROOT / "data" / "samples" / "whiteboard.jpg")))
    if not path.exists():
        pytest.skip(f"Sample image not found at {path}")
    return path
