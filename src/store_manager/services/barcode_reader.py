"""Barcode reading from still images using LLMs."""

import base64
from dataclasses import dataclass
from typing import Protocol

from store_manager.domain.barcode import BarcodeReadout

BARCODE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"barcode": {"type": "string"}},
    "required": ["barcode"],
    "additionalProperties": False,
}

_PROMPT = (
    "You are a highly accurate barcode scanner. Extract the numerical or "
    "alphanumerical code from the barcode in the image. Return only the code, "
    "or an empty string if no barcode is visible."
)


class BarcodeReaderClient(Protocol):
    """Interface for LLM barcode extraction."""

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
        """Return structured barcode data."""


@dataclass
class BarcodeReaderService:
    """Reads a barcode from a photo when local decoding finds nothing."""

    client: BarcodeReaderClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def read(self, image_bytes: bytes) -> str | None:
        """Return the barcode in the image, or None if the model saw none."""
        raw = await self.client.read(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=BARCODE_SCHEMA,
            prompt=_PROMPT,
        )
        code = BarcodeReadout.model_validate(raw).barcode.strip()
        return code or None


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
