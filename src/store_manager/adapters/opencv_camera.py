"""OpenCV video capture as a frame source."""

from dataclasses import dataclass

import cv2

from store_manager.services.scanner import FrameSource


@dataclass
class OpenCVFrameSource(FrameSource):
    """Reads frames from a local camera device."""

    capture: cv2.VideoCapture

    @classmethod
    def open(cls, device: int) -> "OpenCVFrameSource":
        """Open a camera by index, failing if it is missing or busy."""
        capture = cv2.VideoCapture(device)
        if not capture.isOpened():
            capture.release()
            raise RuntimeError(f"Camera {device} could not be opened")
        return cls(capture=capture)

    def read(self) -> object | None:
        """Grab the next frame, or None if the device returned nothing."""
        ok, frame = self.capture.read()
        return frame if ok else None

    def release(self) -> None:
        """Release the camera device."""
        self.capture.release()
