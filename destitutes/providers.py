# destitutes/providers.py
# Narrow interfaces over the hosted services. Firebase adapters live in
# firebase.py / identity.py; tests use in-memory fakes.
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from .models import UserSession

Document = Dict[str, Any]
Snapshot = List[Tuple[str, Document]]  # (id, data) pairs in query order


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


# Placeholder the database adapter swaps for its own server-assigned time.
SERVER_TIMESTAMP = _ServerTimestamp()


class IdentityProvider(Protocol):
    def sign_in_with_popup(self, id_token: str) -> UserSession: ...

    def sign_in_with_password(self, email: str, password: str) -> UserSession: ...

    def register_with_password(self, email: str, password: str) -> UserSession: ...

    def sign_out(self, session: UserSession) -> None: ...


class Listener(Protocol):
    """A live collection subscription. is_active turns False when the stream dies or is closed."""

    @property
    def is_active(self) -> bool: ...

    def close(self) -> None: ...


class DocumentDatabase(Protocol):
    def create_document(self, collection: str, data: Document) -> str: ...

    def get_document(self, collection: str, doc_id: str) -> Optional[Document]: ...

    def set_document(self, collection: str, doc_id: str, data: Document, merge: bool = False) -> None: ...

    def find_documents(self, collection: str, field: str, value: Any, limit: int = 1) -> Snapshot: ...

    def subscribe_collection(
        self,
        collection: str,
        order_by: str,
        limit: int,
        on_change: Callable[[Snapshot], None],
        on_error: Callable[[Exception], None],
    ) -> Listener: ...


class BlobStorage(Protocol):
    def upload(self, path: str, data: bytes, content_type: str) -> str: ...

    def get_public_url(self, ref: str) -> str: ...


class Notifier(Protocol):
    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...
