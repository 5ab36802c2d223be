"""Barcode input channels for the till.

Keyboard-wedge scanners, the camera and manual entry all end up calling the
same ``on_barcode`` callback.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from store_manager.errors import CameraUnavailableError
from store_manager.services.barcode_reader import BarcodeReaderService

ENTER_KEY = "Enter"

_logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled."""

    def cancel(self) -> None:
        """Cancel the callback if it has not run yet."""


class Scheduler(Protocol):
    """Schedules delayed callbacks, e.g. an asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> TimerHandle:
        """Run a callback after a delay in seconds."""


class FrameSource(Protocol):
    """A live video device."""

    def read(self) -> object | None:
        """Return the next frame, or None when no frame is available."""

    def release(self) -> None:
        """Release the underlying device."""


class BarcodeDecoder(Protocol):
    """Local barcode decoding."""

    def decode_frame(self, frame: object) -> str | None:
        """Return the code visible in a video frame, or None."""

    def decode_image(self, image_bytes: bytes) -> str | None:
        """Return the code in an encoded image, or None."""


@dataclass
class KeystrokeBuffer:
    """Assembles keyboard-wedge keystrokes into complete barcodes.

    ``Enter`` flushes immediately. Otherwise a burst is flushed once the
    keyboard has been idle for ``idle_seconds``, but only if it is longer
    than ``min_length`` so stray key presses are not taken for scans.
    Named keys such as ``Shift`` are ignored and leave the buffer and the
    idle timer alone.
    """

    on_barcode: Callable[[str], object]
    idle_seconds: float = 0.12
    min_length: int = 3
    scheduler: Scheduler | None = None
    _buffer: list[str] = field(default_factory=list, init=False)
    _timer: TimerHandle | None = field(default=None, init=False)

    @property
    def pending(self) -> str:
        return "".join(self._buffer)

    def feed(self, key: str) -> object | None:
        """Consume one key. Returns the callback result when Enter flushes."""
        if key == ENTER_KEY:
            return self._flush(require_min_length=False)
        if len(key) != 1 or not key.isprintable():
            return None
        self._buffer.append(key)
        self._arm_timer()
        return None

    def close(self) -> None:
        """Drop any partial burst and cancel the idle timer."""
        self._cancel_timer()
        self._buffer.clear()

    def _arm_timer(self) -> None:
        self._cancel_timer()
        scheduler = self.scheduler or asyncio.get_running_loop()
        self._timer = scheduler.call_later(self.idle_seconds, self._on_idle)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_idle(self) -> None:
        self._timer = None
        self._flush(require_min_length=True)

    def _flush(self, *, require_min_length: bool) -> object | None:
        self._cancel_timer()
        code = "".join(self._buffer)
        self._buffer.clear()
        if not code:
            return None
        if require_min_length and len(code) <= self.min_length:
            return None
        return self.on_barcode(code)


@dataclass
class BarcodeInputRouter:
    """Funnels every barcode source into a single handler.

    The keyboard-wedge and camera channels are muted while a dialog is open
    or a text field has focus, so scans never leak into dialog inputs.
    """

    on_barcode: Callable[[str], object]
    is_dialog_open: Callable[[], bool]
    decoder: BarcodeDecoder | None = None
    barcode_reader: BarcodeReaderService | None = None
    idle_seconds: float = 0.12
    min_length: int = 3
    scheduler: Scheduler | None = None
    text_field_focused: bool = False
    keystrokes: KeystrokeBuffer = field(init=False)

    def __post_init__(self) -> None:
        self.keystrokes = KeystrokeBuffer(
            on_barcode=self._emit_from_keyboard,
            idle_seconds=self.idle_seconds,
            min_length=self.min_length,
            scheduler=self.scheduler,
        )

    def handle_key(self, key: str) -> object | None:
        """Feed a keystroke from a keyboard-wedge scanner."""
        if not self._hardware_enabled():
            return None
        return self.keystrokes.feed(key)

    def submit_manual(self, text: str) -> object | None:
        """Process a barcode typed into the manual entry field."""
        code = text.strip()
        if not code:
            return None
        return self.on_barcode(code)

    async def submit_image(
        self, image_bytes: bytes, *, use_ai_fallback: bool = False
    ) -> object | None:
        """Decode a still image and process the barcode found in it."""
        code = None
        if self.decoder is not None:
            try:
                code = self.decoder.decode_image(image_bytes)
            except Exception:
                _logger.exception("Failed to decode barcode image")
        if code is None and use_ai_fallback and self.barcode_reader is not None:
            try:
                code = await self.barcode_reader.read(image_bytes)
            except Exception:
                _logger.exception("AI barcode reading failed")
        if not code:
            return None
        return self.on_barcode(code)

    def emit_from_camera(self, code: str) -> object | None:
        """Entry point for codes decoded from the live camera."""
        if self.is_dialog_open():
            return None
        return self.on_barcode(code)

    def close(self) -> None:
        self.keystrokes.close()

    def _emit_from_keyboard(self, code: str) -> object | None:
        if not self._hardware_enabled():
            return None
        return self.on_barcode(code)

    def _hardware_enabled(self) -> bool:
        return not self.text_field_focused and not self.is_dialog_open()


@dataclass
class CameraScanner:
    """Continuously decodes barcodes from a live camera.

    ``start`` opens the device and spawns a decode loop; ``stop`` ends the loop
    and releases the device. A code seen again within
    ``repeat_window_seconds`` is treated as the same physical scan.
    """

    frame_source_factory: Callable[[], FrameSource]
    decoder: BarcodeDecoder
    on_barcode: Callable[[str], object]
    repeat_window_seconds: float = 2.0
    poll_interval_seconds: float = 0.05
    stop_timeout_seconds: float = 2.0
    stop_after_first: bool = False
    clock: Callable[[], float] = time.monotonic
    warning: str | None = field(default=None, init=False)
    _task: "asyncio.Task[None] | None" = field(default=None, init=False)
    _stop_requested: bool = field(default=False, init=False)
    _last_code: str | None = field(default=None, init=False)
    _last_code_at: float = field(default=0.0, init=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Open the camera and begin decoding frames."""
        if self.running:
            return
        try:
            source = self.frame_source_factory()
        except Exception as exc:
            self.warning = (
                "Camera access is unavailable. "
                "Use the hardware scanner or manual entry instead."
            )
            _logger.warning("Failed to open camera: %s", exc)
            raise CameraUnavailableError(str(exc)) from exc
        self.warning = None
        self._stop_requested = False
        self._last_code = None
        self._task = asyncio.create_task(self._run(source))

    async def stop(self) -> None:
        """Stop decoding and release the camera."""
        task, self._task = self._task, None
        if task is None:
            return
        self._stop_requested = True
        try:
            await asyncio.wait_for(task, timeout=self.stop_timeout_seconds)
        except TimeoutError:
            _logger.warning("Camera loop did not stop in time; cancelled")

    async def _run(self, source: FrameSource) -> None:
        try:
            while not self._stop_requested:
                try:
                    frame = await asyncio.to_thread(source.read)
                except Exception:
                    _logger.exception("Camera stopped delivering frames")
                    self.warning = (
                        "The camera stopped working. "
                        "Use the hardware scanner or manual entry instead."
                    )
                    break
                if frame is not None and self._handle_frame(frame):
                    if self.stop_after_first:
                        break
                await asyncio.sleep(self.poll_interval_seconds)
        finally:
            try:
                source.release()
            except Exception:
                _logger.exception("Failed to release camera")

    def _handle_frame(self, frame: object) -> bool:
        try:
            code = self.decoder.decode_frame(frame)
        except Exception:
            _logger.exception("Unexpected error while decoding camera frame")
            return False
        if not code:
            return False
        now = self.clock()
        if (
            code == self._last_code
            and now - self._last_code_at < self.repeat_window_seconds
        ):
            return False
        self._last_code = code
        self._last_code_at = now
        try:
            self.on_barcode(code)
        except Exception:
            _logger.exception("Failed to process camera barcode %s", code)
        return True
