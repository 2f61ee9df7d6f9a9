# destitutes/firebase.py
# Firestore + Cloud Storage adapters over firebase_admin.
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Optional
from urllib.parse import quote

import firebase_admin
import requests
from firebase_admin import credentials, firestore, storage
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError

from .config import Settings
from .errors import ProviderError
from .providers import SERVER_TIMESTAMP, Document, Snapshot

log = logging.getLogger(__name__)

DOWNLOAD_TOKEN_KEY = "firebaseStorageDownloadTokens"


@contextmanager
def _provider_errors(action: str):
    try:
        yield
    except GoogleAPIError as e:
        code = getattr(e, "code", None)
        log.warning("%s failed: %s", action, e)
        raise ProviderError(f"{action} failed", code=str(code) if code else None) from e
    except (requests.RequestException, GoogleAuthError) as e:
        # transport and credential refresh failures never reach the API layer
        log.warning("%s failed: %s", action, e)
        raise ProviderError(f"{action} failed", code="unavailable") from e


def init_app(settings: Settings, service_account: Optional[dict] = None) -> firebase_admin.App:
    """Initialise the default firebase_admin app once per process."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    info = service_account if service_account is not None else settings.service_account_info()
    options = {}
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    app = firebase_admin.initialize_app(credentials.Certificate(info), options)
    log.info("firebase app ready (project=%s)", settings.firebase_project_id or info.get("project_id"))
    return app


def _server_values(data: Document) -> Document:
    return {k: (firestore.SERVER_TIMESTAMP if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


class WatchListener:
    # Watch ends on its own thread without calling back, so liveness is polled
    def __init__(self, watch):
        self.watch = watch

    @property
    def is_active(self) -> bool:
        return bool(self.watch.is_active)

    def close(self) -> None:
        self.watch.unsubscribe()


class FirestoreDatabase:
    def __init__(self, client):
        self.client = client

    def create_document(self, collection: str, data: Document) -> str:
        with _provider_errors(f"Writing to {collection}"):
            _, ref = self.client.collection(collection).add(_server_values(data))
        return ref.id

    def get_document(self, collection: str, doc_id: str) -> Optional[Document]:
        with _provider_errors(f"Reading {collection}/{doc_id}"):
            snap = self.client.collection(collection).document(doc_id).get()
        return snap.to_dict() if snap.exists else None

    def set_document(self, collection: str, doc_id: str, data: Document, merge: bool = False) -> None:
        with _provider_errors(f"Writing {collection}/{doc_id}"):
            self.client.collection(collection).document(doc_id).set(_server_values(data), merge=merge)

    def find_documents(self, collection: str, field: str, value: Any, limit: int = 1) -> Snapshot:
        with _provider_errors(f"Querying {collection}"):
            query = (
                self.client.collection(collection)
                .where(filter=firestore.FieldFilter(field, "==", value))
                .limit(limit)
            )
            return [(d.id, d.to_dict()) for d in query.stream()]

    def subscribe_collection(
        self,
        collection: str,
        order_by: str,
        limit: int,
        on_change: Callable[[Snapshot], None],
        on_error: Callable[[Exception], None],
    ) -> "WatchListener":
        query = (
            self.client.collection(collection)
            .order_by(order_by, direction=firestore.Query.DESCENDING)
            .limit(limit)
        )

        # runs on the Watch thread, never raise out of it
        def _on_snapshot(docs, changes, read_time):
            try:
                on_change([(d.id, d.to_dict()) for d in docs])
            except Exception as e:
                on_error(e)

        with _provider_errors(f"Subscribing to {collection}"):
            watch = query.on_snapshot(_on_snapshot)
        return WatchListener(watch)


class FirebaseStorage:
    """
    Cloud Storage bucket that hands out Firebase download URLs
    (the same token-based links the web SDK's getDownloadURL returns).
    """

    def __init__(self, bucket):
        self.bucket = bucket

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        blob = self.bucket.blob(path)
        blob.metadata = {DOWNLOAD_TOKEN_KEY: uuid.uuid4().hex}
        with _provider_errors(f"Uploading {path}"):
            blob.upload_from_string(data, content_type=content_type)
        return path

    def get_public_url(self, ref: str) -> str:
        with _provider_errors(f"Resolving URL for {ref}"):
            blob = self.bucket.get_blob(ref)
            if blob is None:
                raise ProviderError(f"Uploaded object {ref} not found", code="not-found")
            token = (blob.metadata or {}).get(DOWNLOAD_TOKEN_KEY)
            if not token:
                token = uuid.uuid4().hex
                blob.metadata = {**(blob.metadata or {}), DOWNLOAD_TOKEN_KEY: token}
                blob.patch()
        token = token.split(",")[0]
        return (
            f"https://firebasestorage.googleapis.com/v0/b/{self.bucket.name}/o/"
            f"{quote(ref, safe='')}?alt=media&token={token}"
        )


def build_providers(settings: Settings, service_account: Optional[dict] = None):
    """Return (database, storage) bound to the default firebase_admin app."""
    app = init_app(settings, service_account)
    return FirestoreDatabase(firestore.client(app)), FirebaseStorage(storage.bucket(app=app))
