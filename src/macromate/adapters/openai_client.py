"""OpenAI Responses API client for structured outputs."""

import json
import logging
from dataclasses import dataclass

import httpx
from openai import APIError, AsyncOpenAI

from macromate.errors import LookupFailedError
from macromate.services.vision import StructuredOutputClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIStructuredClient(StructuredOutputClient):
    """Structured-output client backed by the OpenAI Responses API."""

    client: AsyncOpenAI
    http_client: httpx.AsyncClient | None = None

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float) -> "OpenAIStructuredClient":
        """Create a client with a managed httpx session."""
        http_client = httpx.AsyncClient(timeout=timeout_seconds)
        return cls(
            client=AsyncOpenAI(api_key=api_key, http_client=http_client),
            http_client=http_client,
        )

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
        """Call the Responses API with a strict JSON schema."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except APIError as exc:
            _logger.warning("Responses API call %s failed: %s", schema_name, exc)
            raise LookupFailedError(
                "The AI service is unavailable. Please try again.",
                {"schema_name": schema_name},
            ) from exc
        output_text = response.output_text
        if not output_text:
            raise LookupFailedError("The model returned an empty response.")
        try:
            return json.loads(output_text)
        except json.JSONDecodeError as exc:
            raise LookupFailedError("The model returned malformed JSON.") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self.http_client is not None:
            await self.http_client.aclose()
