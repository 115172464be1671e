"""Pydantic models for the Excalidraw scene document produced by the assembler."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from sketch_excalidraw.config import APP_STATE, DOCUMENT_SOURCE, DOCUMENT_TYPE, DOCUMENT_VERSION


class AppState(BaseModel):
    """Fixed canvas settings written into every generated document."""

    model_config = ConfigDict(frozen=True)

    gridSize: int = APP_STATE["gridSize"]
    gridStep: int = APP_STATE["gridStep"]
    gridModeEnabled: bool = APP_STATE["gridModeEnabled"]
    viewBackgroundColor: str = APP_STATE["viewBackgroundColor"]


class SceneDocument(BaseModel):
    """A complete Excalidraw file: fixed envelope plus the ordered element list.

    Element order is z-order, so it always matches the order of the CSV rows
    the elements were parsed from.  The model is frozen and the element
    sequence is a tuple, so neither can be changed after construction; the
    repair loop replaces the document wholesale.  The element records
    themselves are plain dicts and are not deep-frozen.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["excalidraw"] = DOCUMENT_TYPE
    version: Literal[2] = DOCUMENT_VERSION
    source: str = DOCUMENT_SOURCE
    elements: tuple[dict[str, Any], ...]
    appState: AppState = Field(default_factory=AppState)
    files: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping for this document."""
        return self.model_dump(mode="json")
