# destitutes/profile.py
import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional

from .auth import AuthSession
from .errors import ProviderError, ValidationError
from .models import UserProfile
from .providers import DocumentDatabase

log = logging.getLogger(__name__)

USERNAME_MIN, USERNAME_MAX = 3, 20
PHONE_DIGITS = 10


def clean_username(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_]", "", value or "")


def clean_phone(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfileService:
    def __init__(self, database: DocumentDatabase, session: AuthSession,
                 users_collection: str = "users", clock: Callable[[], datetime] = _utcnow):
        self.database = database
        self.session = session
        self.users_collection = users_collection
        self.clock = clock

    def is_username_taken(self, username: str) -> bool:
        try:
            hits = self.database.find_documents(self.users_collection, "username", username.lower(), limit=1)
        except ProviderError:
            # lookup failure should not block the form
            log.exception("username lookup failed")
            return False
        uid = self.session.user.uid if self.session.user else None
        return any(doc_id != uid for doc_id, _ in hits)

    def validate(self, username: str, phone: str) -> None:
        if not username.strip():
            raise ValidationError("Username is required")
        if len(username) < USERNAME_MIN:
            raise ValidationError(f"Username must be at least {USERNAME_MIN} characters long")
        if len(username) > USERNAME_MAX:
            raise ValidationError(f"Username must be less than {USERNAME_MAX} characters")

        current = self.session.profile.username if self.session.profile else None
        if username.lower() != (current or "").lower() and self.is_username_taken(username):
            raise ValidationError("Username is already taken. Please choose another one.")

        if not phone.strip():
            raise ValidationError("Phone number is required")
        if len(phone) != PHONE_DIGITS:
            raise ValidationError(f"Please enter a valid {PHONE_DIGITS}-digit phone number")

    def complete(self, username: str, phone: str) -> UserProfile:
        """Validate and store users/{uid}. Raises ValidationError or ProviderError."""
        user = self.session.require_user("Please sign in to complete your profile")

        username, phone = clean_username(username).strip(), clean_phone(phone)
        self.validate(username, phone)

        now = self.clock()
        previous = self.session.profile
        profile = UserProfile(
            uid=user.uid,
            email=user.email,
            username=username.lower(),
            phone_number=phone,
            display_name=user.display_name or username,
            photo_url=user.photo_url,
            created_at=(previous.created_at if previous and previous.created_at else now),
            updated_at=now,
            is_profile_complete=True,
        )
        self.database.set_document(self.users_collection, user.uid, profile.to_document())
        self.session.resolve(user, profile)
        log.info("profile completed uid=%s", user.uid)
        return profile
