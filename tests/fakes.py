# tests/fakes.py
# In-memory stand-ins for the hosted services.
from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Any

from PIL import Image

from destitutes.errors import AuthError, CameraUnavailable, PermissionDenied, ProviderError
from destitutes.models import UserSession
from destitutes.providers import SERVER_TIMESTAMP


def png_bytes(size=(8, 6), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def errors(self) -> list[str]:
        return [m for kind, m in self.messages if kind == "error"]

    def successes(self) -> list[str]:
        return [m for kind, m in self.messages if kind == "success"]


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {}
        self.fail_writes = False
        self.fail_reads = False
        self.subscriptions: list[dict] = []
        self._next = 0
        self.calls: list[str] = []

    def _resolve(self, data: dict) -> dict:
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}

    def create_document(self, collection: str, data: dict) -> str:
        self.calls.append("create_document")
        if self.fail_writes:
            raise ProviderError("Writing failed", code="permission-denied")
        self._next += 1
        doc_id = f"doc{self._next}"
        self.collections.setdefault(collection, {})[doc_id] = self._resolve(data)
        return doc_id

    def get_document(self, collection: str, doc_id: str):
        if self.fail_reads:
            raise ProviderError("Reading failed", code="unavailable")
        return self.collections.get(collection, {}).get(doc_id)

    def set_document(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        if self.fail_writes:
            raise ProviderError("Writing failed", code="permission-denied")
        docs = self.collections.setdefault(collection, {})
        docs[doc_id] = {**docs.get(doc_id, {}), **data} if merge else dict(data)

    def find_documents(self, collection: str, field: str, value: Any, limit: int = 1):
        if self.fail_reads:
            raise ProviderError("Querying failed", code="unavailable")
        hits = [(i, d) for i, d in self.collections.get(collection, {}).items() if d.get(field) == value]
        return hits[:limit]

    def subscribe_collection(self, collection, order_by, limit, on_change, on_error):
        sub = {"collection": collection, "order_by": order_by, "limit": limit,
               "on_change": on_change, "on_error": on_error, "active": True}
        self.subscriptions.append(sub)
        return FakeListener(sub)


class FakeListener:
    def __init__(self, sub: dict) -> None:
        self.sub = sub

    @property
    def is_active(self) -> bool:
        return self.sub["active"]

    def close(self) -> None:
        self.sub["active"] = False


class FakeStorage:
    def __init__(self) -> None:
        self.blobs: dict[str, tuple[bytes, str]] = {}
        self.fail_upload = False
        self.calls: list[str] = []

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        self.calls.append("upload")
        if self.fail_upload:
            raise ProviderError("Uploading failed", code="storage/unauthorized")
        self.blobs[path] = (data, content_type)
        return path

    def get_public_url(self, ref: str) -> str:
        return f"https://files.example/{ref}?token=t"


class FakeIdentity:
    def __init__(self, fail_code: str | None = None) -> None:
        self.fail_code = fail_code
        self.calls: list[tuple] = []

    def _answer(self, *call) -> UserSession:
        self.calls.append(call)
        if self.fail_code:
            raise AuthError(self.fail_code, code=self.fail_code)
        return UserSession(uid="u1", email="asha@example.com", display_name="Asha")

    def sign_in_with_popup(self, id_token):
        return self._answer("popup", id_token)

    def sign_in_with_password(self, email, password):
        return self._answer("password", email, password)

    def register_with_password(self, email, password):
        return self._answer("register", email, password)

    def sign_out(self, session) -> None:
        self.calls.append(("sign_out", session.uid))


class FakeStream:
    def __init__(self, frame: Image.Image | None = None) -> None:
        self.frame = frame if frame is not None else Image.new("RGB", (16, 9), (10, 120, 10))
        self.tracks = 1

    def active_tracks(self) -> int:
        return self.tracks

    def grab_frame(self):
        return self.frame

    def stop(self) -> None:
        self.tracks = 0


class FakeCamera:
    def __init__(self, error: Exception | None = None, frame: Image.Image | None = None) -> None:
        self.error = error
        self.frame = frame
        self.streams: list[FakeStream] = []
        self.opened_with: dict = {}

    def open(self, facing_mode="environment", width=1280, height=720):
        self.opened_with = {"facing_mode": facing_mode, "width": width, "height": height}
        if self.error:
            raise self.error
        stream = FakeStream(self.frame)
        self.streams.append(stream)
        return stream


def unsupported_camera() -> FakeCamera:
    return FakeCamera(error=CameraUnavailable("Camera not supported in this browser"))


def denied_camera() -> FakeCamera:
    return FakeCamera(error=PermissionDenied("Permission denied"))


def fixed_position(lat: float, lon: float):
    calls = []

    def source(options, attempt):
        calls.append((options, attempt))
        return {"coords": {"latitude": lat, "longitude": lon, "accuracy": 12.0}}

    source.calls = calls
    return source


def denied_position(options, attempt):
    return {"error": {"code": 1, "message": "User denied Geolocation"}}


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeHTTP:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response or FakeResponse()
        self.error = error
        self.requests: list[dict] = []

    def post(self, url, **kwargs):
        self.requests.append({"url": url, **kwargs})
        if self.error:
            raise self.error
        return self.response
