# destitutes/capture.py
# Capture Source: a still image from a live camera stream or a picked file.
import io
import logging
from typing import Optional, Protocol

from PIL import Image

from .errors import CameraUnavailable, ValidationError
from .models import ImagePayload

log = logging.getLogger(__name__)

CAPTURE_FILENAME = "captured-photo.jpg"


class MediaStream(Protocol):
    def active_tracks(self) -> int: ...

    def grab_frame(self) -> Optional[Image.Image]: ...

    def stop(self) -> None: ...


class CameraDevice(Protocol):
    def open(self, facing_mode: str = "environment", width: int = 1280, height: int = 720) -> MediaStream:
        """Raise PermissionDenied or CameraUnavailable when no stream can be had."""
        ...


def encode_jpeg(image: Image.Image, quality: int = 80) -> bytes:
    buf = io.BytesIO()
    image.convert("RGB").save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


class CameraSession:
    """
    Owns one open camera stream from open() until close().

    close() is idempotent and must run on every way out of the camera view:
    after a capture, on cancel, and when the whole upload flow is dismissed.
    Also usable as a context manager.
    """

    def __init__(self, device: CameraDevice, quality: int = 80):
        # rear camera preferred
        self.stream = device.open(facing_mode="environment", width=1280, height=720)
        self.quality = quality
        self.closed = False

    def capture(self) -> ImagePayload:
        if self.closed:
            raise CameraUnavailable("Camera is closed")
        frame = self.stream.grab_frame()
        if frame is None:
            raise CameraUnavailable("Camera is not ready yet")
        return ImagePayload(encode_jpeg(frame, self.quality), "image/jpeg", CAPTURE_FILENAME)

    def close(self) -> None:
        if self.closed:
            return
        try:
            self.stream.stop()
        finally:
            self.closed = True
        log.debug("camera stream released")

    def __enter__(self) -> "CameraSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def accept_file(filename: Optional[str], content_type: Optional[str], data: bytes) -> ImagePayload:
    """File origin: only the declared type is checked, size is left to storage."""
    if not content_type or not content_type.startswith("image/"):
        raise ValidationError("Please select an image file")
    return ImagePayload(data=data, content_type=content_type, filename=filename or "upload")
