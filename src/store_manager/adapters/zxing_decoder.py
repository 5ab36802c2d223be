"""Barcode decoding with zxing-cpp."""

from dataclasses import dataclass

import cv2
import numpy as np
import zxingcpp

from store_manager.services.scanner import BarcodeDecoder


@dataclass
class ZxingBarcodeDecoder(BarcodeDecoder):
    """Decodes 1D and 2D barcodes from frames and still images."""

    def decode_frame(self, frame: object) -> str | None:
        """Return the first non-empty code found in a BGR frame."""
        for result in zxingcpp.read_barcodes(frame):
            text = result.text.strip()
            if text:
                return text
        return None

    def decode_image(self, image_bytes: bytes) -> str | None:
        """Decode an encoded image (JPEG, PNG, ...) and read its barcode."""
        if not image_bytes:
            return None
        array = np.frombuffer(image_bytes, np.uint8)
        image = cv2.imdecode(array, cv2.IMREAD_COLOR)
        if image is None:
            return None
        return self.decode_frame(image)
