"""Models for LLM barcode reading results."""

from pydantic import BaseModel


class BarcodeReadout(BaseModel):
    """Structured output for barcode extraction from an image."""

    barcode: str
