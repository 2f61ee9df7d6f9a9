# destitutes/feed.py
# Feed Reader: live, newest-first list of posts.
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError as ModelError

from .errors import ProviderError
from .models import Post
from .providers import DocumentDatabase, Listener, Snapshot

log = logging.getLogger(__name__)


def relative_time(ts: Optional[datetime], now: Optional[datetime] = None) -> str:
    if ts is None:
        # server timestamp not resolved yet
        return "Just now"
    now = now or datetime.now(timezone.utc)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    hours = int((now - ts).total_seconds() // 3600)
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days > 1 else ''} ago"


@dataclass(frozen=True)
class FeedItem:
    post: Post
    label: str
    coordinates: str
    maps_url: str
    posted: str


def to_feed_item(post: Post, now: Optional[datetime] = None) -> FeedItem:
    return FeedItem(
        post=post,
        label=post.display_label,
        coordinates=post.location.display(),
        maps_url=post.location.maps_url(),
        posted=relative_time(post.created_at, now),
    )


def project(snapshot: Snapshot) -> List[Post]:
    """Parse a collection snapshot into posts, newest first. Undated posts go last."""
    posts = []
    for doc_id, data in snapshot:
        try:
            posts.append(Post.from_document(doc_id, data or {}))
        except ModelError as e:
            log.warning("skipping malformed post %s: %s", doc_id, e.error_count())
    dated = sorted((p for p in posts if p.created_at), key=lambda p: _aware(p.created_at), reverse=True)
    undated = sorted((p for p in posts if not p.created_at), key=lambda p: p.id or "", reverse=True)
    return dated + undated


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


class FeedSubscription:
    """
    Live view of the photos collection.

    open() starts the provider subscription, close() ends it; close() is
    idempotent and the object is a context manager, so the owner can tie
    it to its own lifetime. Snapshots arrive on a provider thread.
    """

    def __init__(self, database: DocumentDatabase, collection: str = "photos",
                 order_by: str = "createdAt", limit: int = 50):
        self.database = database
        self.collection = collection
        self.order_by = order_by
        self.limit = limit
        self._lock = threading.Lock()
        self._posts: List[Post] = []
        self._listener: Optional[Listener] = None
        self._closed = False
        self.loaded = False
        self.version = 0
        self.error: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self._listener is not None

    @property
    def posts(self) -> List[Post]:
        with self._lock:
            return list(self._posts)

    def items(self, now: Optional[datetime] = None) -> List[FeedItem]:
        return [to_feed_item(p, now) for p in self.posts]

    def open(self) -> "FeedSubscription":
        if self.is_open:
            return self
        self._closed = False
        try:
            self._listener = self.database.subscribe_collection(
                self.collection, self.order_by, self.limit, self._on_change, self._on_error
            )
        except ProviderError as e:
            self._on_error(e)
        return self

    def _on_change(self, snapshot: Snapshot) -> None:
        posts = project(snapshot)[: self.limit]
        with self._lock:
            self._posts = posts
            self.loaded = True
            self.error = None
            self.version += 1

    def _on_error(self, exc: Exception) -> None:
        # an unreadable feed shows as empty
        log.error("feed subscription error: %s", exc)
        with self._lock:
            self._posts = []
            self.loaded = True
            self.error = str(exc)
            self.version += 1

    def ensure_live(self) -> bool:
        """
        Reopen the subscription when the provider stream has died on its own.
        Call periodically; returns whether a listener is running.
        """
        if self._closed:
            return False
        listener = self._listener
        if listener is not None and listener.is_active:
            return True
        if listener is not None:
            self._listener = None
            self._on_error(ProviderError("Feed listener stopped", code="unavailable"))
        self.open()
        return self.is_open

    def close(self) -> None:
        self._closed = True
        listener, self._listener = self._listener, None
        if listener is not None:
            listener.close()
            log.debug("feed subscription closed")

    def __enter__(self) -> "FeedSubscription":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
