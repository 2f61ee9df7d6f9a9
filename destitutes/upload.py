# destitutes/upload.py
"""
Upload Orchestrator: the multi-step "Share a Photo" flow.

    Idle -> Capturing (camera|file) -> Previewing -> ReadyToSubmit
         -> ConfirmWarning -> Uploading -> Succeeded | Failed

Everything before Uploading is local and reversible. Uploading writes the
image to blob storage first and only then creates the Post document, so a
failed blob write never leaves a visible record. A failed document write
leaves an unreferenced blob behind; that is logged and otherwise accepted.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .auth import AuthSession
from .capture import CameraDevice, CameraSession, accept_file
from .errors import AppError, CameraUnavailable, GeolocationUnavailable, PermissionDenied, ProviderError
from .geolocation import GeolocationProbe
from .models import DESCRIPTION_MAX_CHARS, GeoPoint, ImagePayload, Post
from .providers import SERVER_TIMESTAMP, BlobStorage, DocumentDatabase, Notifier

log = logging.getLogger(__name__)


class UploadState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    PREVIEWING = "previewing"
    READY_TO_SUBMIT = "ready_to_submit"
    CONFIRM_WARNING = "confirm_warning"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# phases that override what the held inputs would imply
_EXPLICIT = (UploadState.CAPTURING, UploadState.CONFIRM_WARNING, UploadState.UPLOADING)


@dataclass(frozen=True)
class UploadResult:
    post_id: str
    post: Post


class UploadOrchestrator:
    def __init__(
        self,
        session: AuthSession,
        database: DocumentDatabase,
        storage: BlobStorage,
        notifier: Notifier,
        photos_collection: str = "photos",
        jpeg_quality: int = 80,
        clock: Callable[[], float] = time.time,
        on_complete: Optional[Callable[[UploadResult], None]] = None,
    ):
        self.session = session
        self.database = database
        self.storage = storage
        self.notifier = notifier
        self.photos_collection = photos_collection
        self.jpeg_quality = jpeg_quality
        self.clock = clock
        self.on_complete = on_complete

        self._phase = UploadState.IDLE
        self.capture_origin: Optional[str] = None  # "camera" | "file"
        self.camera: Optional[CameraSession] = None
        self.camera_error: Optional[str] = None
        self.image: Optional[ImagePayload] = None
        self.image_epoch = 0  # bumped whenever the held image is dropped
        self.location: Optional[GeoPoint] = None
        self.location_pending = False
        self.description = ""
        self.is_anonymous = False
        self.last_outcome: Optional[UploadState] = None
        self.last_error: Optional[str] = None

    # ---------- derived state ----------
    @property
    def state(self) -> UploadState:
        if self._phase in _EXPLICIT:
            return self._phase
        if self.image is None:
            return UploadState.IDLE
        return UploadState.READY_TO_SUBMIT if self.location is not None else UploadState.PREVIEWING

    @property
    def can_submit(self) -> bool:
        return self.state is UploadState.READY_TO_SUBMIT

    @property
    def busy(self) -> bool:
        return self._phase is UploadState.UPLOADING

    def _locked(self) -> bool:
        return self._phase in (UploadState.CONFIRM_WARNING, UploadState.UPLOADING)

    # ---------- capture ----------
    def _release_camera(self) -> None:
        if self.camera is not None:
            try:
                self.camera.close()
            finally:
                self.camera = None

    def start_camera(self, device: CameraDevice) -> bool:
        if self._locked():
            return False
        self._release_camera()
        self.camera_error = None
        try:
            self.camera = CameraSession(device, quality=self.jpeg_quality)
        except (PermissionDenied, CameraUnavailable) as e:
            log.warning("camera unavailable: %s", e)
            self.camera_error = "Unable to access camera. Please check permissions and try again."
            self.notifier.error("Unable to access camera. Please select a file instead.")
            self._phase = UploadState.IDLE
            return False
        self._phase = UploadState.CAPTURING
        self.capture_origin = "camera"
        return True

    def capture_photo(self) -> Optional[ImagePayload]:
        if self._phase is not UploadState.CAPTURING or self.camera is None:
            return None
        try:
            payload = self.camera.capture()
        except CameraUnavailable as e:
            self.notifier.error(str(e))
            return None
        self._release_camera()
        self.image = payload
        self._phase = UploadState.IDLE
        return payload

    def choose_file(self) -> bool:
        if self._locked():
            return False
        self._release_camera()
        self._phase = UploadState.CAPTURING
        self.capture_origin = "file"
        return True

    def select_file(self, filename: Optional[str], content_type: Optional[str], data: bytes) -> Optional[ImagePayload]:
        if self._locked():
            return None
        try:
            payload = accept_file(filename, content_type, data)
        except AppError as e:
            # wrong type: no state change
            self.notifier.error(str(e))
            return None
        self._release_camera()
        self.image = payload
        self.capture_origin = "file"
        self._phase = UploadState.IDLE
        return payload

    def cancel_capture(self) -> None:
        if self._phase is UploadState.CAPTURING:
            self._release_camera()
            self._phase = UploadState.IDLE

    def discard_image(self) -> None:
        if self._locked():
            return
        self.image = None
        self.capture_origin = None
        self.image_epoch += 1

    def dismiss(self) -> None:
        """The surrounding dialog went away. Inputs stay; the camera does not."""
        self._release_camera()
        if self._phase in (UploadState.CAPTURING, UploadState.CONFIRM_WARNING):
            self._phase = UploadState.IDLE

    # ---------- location + metadata ----------
    def request_location(self, probe: GeolocationProbe) -> Optional[GeoPoint]:
        if self.location is not None:
            # control is disabled once a fix is held
            return self.location
        if self._locked():
            return None
        try:
            fix = probe.locate()
        except (PermissionDenied, GeolocationUnavailable) as e:
            log.warning("geolocation failed: %s", e)
            self.location_pending = False
            self.notifier.error("Failed to get location. Please enable location access.")
            return None
        if fix is None:
            if not self.location_pending:
                self.notifier.info("Getting your location...")
            self.location_pending = True
            return None
        self.location_pending = False
        self.location = fix
        self.notifier.success("Location captured successfully!")
        return fix

    def set_description(self, text: str) -> bool:
        text = text or ""
        if len(text) > DESCRIPTION_MAX_CHARS:
            self.notifier.error(f"Description must be at most {DESCRIPTION_MAX_CHARS} characters")
            return False
        self.description = text
        return True

    def set_anonymous(self, flag: bool) -> None:
        self.is_anonymous = bool(flag)

    # ---------- submit ----------
    def submit(self) -> bool:
        if self._locked() or self._phase is UploadState.CAPTURING:
            return False
        if self.image is None:
            self.notifier.error("Please select an image")
            return False
        if self.location is None:
            self.notifier.error("Please capture your location")
            return False
        self._phase = UploadState.CONFIRM_WARNING
        return True

    def cancel_warning(self) -> None:
        if self._phase is UploadState.CONFIRM_WARNING:
            self._phase = UploadState.IDLE

    def _blob_path(self, uid: str) -> str:
        stamp = int(self.clock() * 1000)
        name = (self.image.filename or "photo.jpg").replace("/", "_")
        return f"photos/{uid}/{stamp}_{name}"

    def confirm(self) -> Optional[UploadResult]:
        """Acknowledge the warning and run both writes. Only valid from ConfirmWarning."""
        if self._phase is not UploadState.CONFIRM_WARNING:
            return None

        user = self.session.user
        if user is None:
            self._phase = UploadState.IDLE
            self.notifier.error("Please sign in to upload photos")
            return None

        self._phase = UploadState.UPLOADING
        self.last_error = None
        path = self._blob_path(user.uid)
        blob_written = False
        try:
            ref = self.storage.upload(path, self.image.data, self.image.content_type or "image/jpeg")
            blob_written = True
            url = self.storage.get_public_url(ref)
            post = Post(
                owner_id=user.uid,
                owner_email=user.email,
                display_name=self.session.display_name(),
                image_url=url,
                image_path=ref,
                location=self.location,
                description=self.description.strip() or None,
                is_anonymous=self.is_anonymous,
            )
            post_id = self.database.create_document(
                self.photos_collection,
                {**post.to_document(), "createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP},
            )
        except ProviderError as e:
            if blob_written:
                log.warning("post write failed, blob left unreferenced at %s", path)
            log.exception("upload failed uid=%s", user.uid)
            self._phase = UploadState.IDLE
            self.last_outcome = UploadState.FAILED
            self.last_error = f"Upload failed: {e.code}" if e.code else "Failed to upload photo. Please try again."
            self.notifier.error(self.last_error)
            return None
        except Exception:
            # not a provider failure: leave Uploading anyway so the inputs stay usable
            self._phase = UploadState.IDLE
            self.last_outcome = UploadState.FAILED
            raise

        post.id = post_id
        result = UploadResult(post_id=post_id, post=post)
        log.info("photo uploaded id=%s path=%s", post_id, path)
        self.reset()
        self.last_outcome = UploadState.SUCCEEDED
        self.notifier.success("Photo uploaded successfully!")
        if self.on_complete is not None:
            self.on_complete(result)
        return result

    def reset(self) -> None:
        self._release_camera()
        self._phase = UploadState.IDLE
        self.capture_origin = None
        self.camera_error = None
        self.image = None
        self.image_epoch += 1
        self.location = None
        self.location_pending = False
        self.description = ""
        self.is_anonymous = False
