"""Request payloads for the point-of-sale API."""

from pydantic import BaseModel, Field


class StartSessionRequest(BaseModel):
    name: str


class ScanRequest(BaseModel):
    barcode: str


class KeystrokesRequest(BaseModel):
    """Key names forwarded from the till's keyboard, in order."""

    keys: list[str] = Field(default_factory=list)


class ImageScanRequest(BaseModel):
    image_base64: str
    use_ai_fallback: bool = False


class FocusRequest(BaseModel):
    text_field: bool


class TemporaryProductRequest(BaseModel):
    name: str
    price: float
