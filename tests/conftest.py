"""Shared test configuration and fixtures."""

import pytest
from dotenv import load_dotenv

from sketch_excalidraw.config import ROOT

# Load .env from project root for all tests
load_dotenv(ROOT / ".env")


class ScriptedRepairTransform:
    """Repair collaborator that replays canned responses and records every request."""

    def __init__(self, responses: list[str]):
        self.responses = list(responses)
        self.calls: list[list[dict]] = []

    def generate(self, turns: list[dict]) -> str:
        self.calls.append(turns)
        return self.responses.pop(0)


class ScriptedImageTransform:
    """Vision collaborator that replays canned responses and records every request."""

    def __init__(self, responses: list[str]):
        self.responses = list(responses)
        self.calls: list[tuple] = []

    def generate(self, image, turns: list[dict]) -> str:
        self.calls.append((image, turns))
        return self.responses.pop(0)


@pytest.fixture
def scripted_repair():
    return ScriptedRepairTransform


@pytest.fixture
def scripted_image():
    return ScriptedImageTransform
