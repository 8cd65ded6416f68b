"""Food identification from meal photos using LLMs."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from macromate.domain.vision import FoodIdentification
from macromate.errors import LookupFailedError

IDENTIFY_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "food_items": {
            "type": "array",
            "items": {"type": "string"},
        }
    },
    "required": ["food_items"],
    "additionalProperties": False,
}

IDENTIFY_PROMPT = (
    "You are an expert food identifier. Identify the food items present "
    "in the photo of this meal. Return a list of strings, where each string "
    "is one food item identified in the photo."
)

_logger = logging.getLogger(__name__)


class StructuredOutputClient(Protocol):
    """Interface for schema-constrained model calls."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return the model's JSON output matching the schema."""


@dataclass
class VisionService:
    """Service that prepares identification prompts and validates results."""

    client: StructuredOutputClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def identify(self, image_bytes: bytes) -> list[str]:
        """Return food-name guesses for a meal photo, in model order."""
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=IDENTIFY_PROMPT,
            schema=IDENTIFY_SCHEMA,
            schema_name="identify_food",
            image_data_url=to_data_url(image_bytes),
        )
        try:
            result = FoodIdentification.model_validate(raw)
        except ValidationError as exc:
            _logger.warning("Food identification returned invalid data")
            raise LookupFailedError(
                "Could not identify food items in the photo."
            ) from exc
        names = [name.strip() for name in result.food_items if name.strip()]
        _logger.info("Identified %s food items in photo", len(names))
        return names


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[4:12] in {b"ftypheic", b"ftypheix", b"ftypmif1"}:
        return "image/heic"
    return "image/jpeg"
