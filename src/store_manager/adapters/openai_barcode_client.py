"""OpenAI Responses API client for reading barcodes from photos."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from store_manager.services.barcode_reader import BarcodeReaderClient


@dataclass
class OpenAIBarcodeReaderClient(BarcodeReaderClient):
    """Barcode reader backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(
        cls, api_key: str, timeout_seconds: float = 20.0
    ) -> "OpenAIBarcodeReaderClient":
        """Create a client with a per-request timeout."""
        return cls(client=AsyncOpenAI(api_key=api_key, timeout=timeout_seconds))

    async def read(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Ask the model for the code and decode its structured reply."""
        request = _build_request(
            model=model,
            prompt=prompt,
            image_data_url=image_data_url,
            schema=schema,
            store=store,
        )
        if reasoning_effort:
            request["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request)
        if not response.output_text:
            raise RuntimeError("OpenAI returned no barcode readout")
        return json.loads(response.output_text)

    async def close(self) -> None:
        await self.client.close()


def _build_request(
    *,
    model: str,
    prompt: str,
    image_data_url: str,
    schema: dict[str, object],
    store: bool,
) -> dict[str, object]:
    # Barcodes need full-resolution input.
    image_part = {"type": "input_image", "image_url": image_data_url, "detail": "high"}
    return {
        "model": model,
        "input": [
            {
                "role": "user",
                "content": [{"type": "input_text", "text": prompt}, image_part],
            }
        ],
        "text": {
            "format": {
                "type": "json_schema",
                "name": "barcode_readout",
                "strict": True,
                "schema": schema,
            }
        },
        "store": store,
    }
