"""OpenAI-backed implementations of the two generative collaborators.

Handles:
- client construction (Azure OpenAI ``/openai/v1/`` endpoint, or OpenRouter)
- the vision transform used by the imageToCsv and validateCsv stages
- the JSON repair transform used by the validate-repair loop

Every API error, timeout, or empty completion is raised as
``TransformationFailure`` so the pipeline can classify it.
"""

import logging
import os
import time

import openai
from openai import OpenAI

from sketch_excalidraw import config
from sketch_excalidraw.conversion.errors import TransformationFailure
from sketch_excalidraw.conversion.transforms import ImagePayload, Turn
from sketch_excalidraw.prompts import IMAGE_TO_CSV_SYSTEM_PROMPT, REPAIR_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Cached resources -- populated lazily on first access
# ---------------------------------------------------------------------------
_CACHE: dict = {
    "client": None,
}


def build_client() -> OpenAI:
    """Create an OpenAI client for the configured provider.

    Prefers Azure OpenAI (``AZURE_OPENAI_ENDPOINT`` + ``AZURE_OPENAI_API_KEY``)
    and falls back to OpenRouter (``OPENROUTER_API_KEY``).
    """
    endpoint = os.getenv("AZURE_OPENAI_ENDPOINT", "").rstrip("/")
    api_key = os.getenv("AZURE_OPENAI_API_KEY", "")
    if endpoint and api_key:
        # Azure's OpenAI-compatible surface lives under /openai/v1/
        base_url = f"{endpoint}/openai/v1/"
        logger.info("Connecting to Azure OpenAI at %s", base_url)
        return OpenAI(base_url=base_url, api_key=api_key)

    openrouter_key = os.getenv("OPENROUTER_API_KEY", "")
    if openrouter_key:
        logger.info("Connecting to OpenRouter at %s", config.OPENROUTER_BASE_URL)
        return OpenAI(base_url=config.OPENROUTER_BASE_URL, api_key=openrouter_key, default_headers={"X-Title": "sketch-to-excalidraw"})

    raise RuntimeError("AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY (or OPENROUTER_API_KEY) must be set in .env")


def get_client() -> OpenAI:
    """Return the cached client, building it on first use."""
    if _CACHE["client"] is None:
        _CACHE["client"] = build_client()
    return _CACHE["client"]


def _complete(client: OpenAI, model: str, messages: list[dict], timeout: float, label: str, **kwargs) -> str:
    """Run one chat completion and return its text, raising TransformationFailure on any fault."""
    t0 = time.time()
    try:
        response = client.chat.completions.create(model=model, messages=messages, timeout=timeout, **kwargs)
    except openai.OpenAIError as exc:
        raise TransformationFailure(f"{label} call failed after {time.time() - t0:.1f}s: {exc}") from exc
    elapsed = time.time() - t0

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise TransformationFailure(f"{label} returned an empty response after {elapsed:.1f}s")

    if response.usage:
        logger.info(
            "%s: %.1fs, usage prompt=%d, completion=%d, total=%d",
            label,
            elapsed,
            response.usage.prompt_tokens,
            response.usage.completion_tokens,
            response.usage.total_tokens,
        )
    return content


# ---------------------------------------------------------------------------
# Vision transform (image + conversation -> CSV text)
# ---------------------------------------------------------------------------


def _attach_image(turns: list[Turn], image: ImagePayload) -> list[dict]:
    """Convert text turns to chat messages, attaching the image to the first user turn."""
    messages: list[dict] = []
    attached = False
    for turn in turns:
        if turn["role"] == "user" and not attached:
            content = [
                {"type": "image_url", "image_url": {"url": image.data_url, "detail": "high"}},
                {"type": "text", "text": turn["content"]},
            ]
            messages.append({"role": "user", "content": content})
            attached = True
        else:
            messages.append({"role": turn["role"], "content": turn["content"]})
    return messages


class OpenAIImageTransform:
    """Vision model that describes a whiteboard image as Excalidraw CSV."""

    def __init__(self, client: OpenAI, deployment: str, timeout: float = config.REQUEST_TIMEOUT):
        self.client = client
        self.deployment = deployment
        self.timeout = timeout

    def generate(self, image: ImagePayload, turns: list[Turn]) -> str:
        messages = [{"role": "system", "content": IMAGE_TO_CSV_SYSTEM_PROMPT}] + _attach_image(turns, image)
        logger.info("Sending %.1f KB image with %d turns to %s", len(image.data) / 1024, len(turns), self.deployment)
        return _complete(self.client, self.deployment, messages, self.timeout, "Vision model")


# ---------------------------------------------------------------------------
# Repair transform (conversation -> JSON text)
# ---------------------------------------------------------------------------


class OpenAIRepairTransform:
    """Text model that returns a corrected Excalidraw JSON document."""

    def __init__(self, client: OpenAI, deployment: str, timeout: float = config.REQUEST_TIMEOUT):
        self.client = client
        self.deployment = deployment
        self.timeout = timeout

    def generate(self, turns: list[Turn]) -> str:
        messages = [{"role": "system", "content": REPAIR_SYSTEM_PROMPT}] + [{"role": t["role"], "content": t["content"]} for t in turns]
        return _complete(
            self.client,
            self.deployment,
            messages,
            self.timeout,
            "Repair model",
            response_format={"type": "json_object"},
        )


def build_transforms(timeout: float | None = None) -> tuple[OpenAIImageTransform, OpenAIRepairTransform]:
    """Build the (image, repair) transform pair from the environment configuration."""
    client = get_client()
    timeout = config.REQUEST_TIMEOUT if timeout is None else timeout
    image_transform = OpenAIImageTransform(client, config.vision_deployment(), timeout)
    repair_transform = OpenAIRepairTransform(client, config.repair_deployment(), timeout)
    logger.info("Transforms ready: vision=%s, repair=%s", image_transform.deployment, repair_transform.deployment)
    return image_transform, repair_transform
