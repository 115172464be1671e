"""Unit tests for the configuration module."""

# pylint: disable=missing-class-docstring,missing-function-docstring

from pathlib import Path

from sketch_excalidraw import config


class TestOutputFilename:

    def test_simple_name(self):
        assert config.output_filename("board.jpg") == "board.excalidraw"

    def test_everything_after_first_dot_dropped(self):
        assert config.output_filename("AI-agent_architecture.v2.jpg") == "AI-agent_architecture.excalidraw"

    def test_directory_components_dropped(self):
        assert config.output_filename("uploads/board.png") == "board.excalidraw"

    def test_no_extension(self):
        assert config.output_filename("board") == "board.excalidraw"


class TestDeployments:

    def test_repair_defaults_to_vision(self, monkeypatch):
        monkeypatch.setenv("AZURE_OPENAI_DEPLOYMENT_NAME", "vision-model")
        monkeypatch.delenv("EXCALIDRAW_REPAIR_DEPLOYMENT", raising=False)
        assert config.repair_deployment() == "vision-model"

    def test_repair_override(self, monkeypatch):
        monkeypatch.setenv("EXCALIDRAW_REPAIR_DEPLOYMENT", "repair-model")
        assert config.repair_deployment() == "repair-model"

    def test_vision_default(self, monkeypatch):
        monkeypatch.delenv("AZURE_OPENAI_DEPLOYMENT_NAME", raising=False)
        assert config.vision_deployment() == "gpt-5.2-chat"


class TestConstants:

    def test_app_state(self):
        assert config.APP_STATE == {"gridSize": 20, "gridStep": 5, "gridModeEnabled": False, "viewBackgroundColor": "#ffffff"}

    def test_envelope(self):
        assert config.DOCUMENT_TYPE == "excalidraw"
        assert config.DOCUMENT_VERSION == 2

    def test_root_is_project_root(self):
        """ROOT should point to the project root (contains pyproject.toml)."""
        assert isinstance(config.ROOT, Path)
        assert (config.ROOT / "pyproject.toml").exists()
