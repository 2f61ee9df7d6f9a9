# destitutes/auth.py
"""
Session context and the email / Google sign-in flows.

AuthSession replaces an ambient "current user" global: one instance per
browser session, created by the app and handed to every view that needs it.
It starts UNRESOLVED and becomes SIGNED_IN or SIGNED_OUT once the identity
provider has answered.
"""
import logging
import re
from enum import Enum
from typing import Callable, List, Optional

from .errors import AuthError, ProviderError, ValidationError
from .models import ANONYMOUS_LABEL, UserProfile, UserSession
from .providers import DocumentDatabase, IdentityProvider

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_FRIENDLY = {
    "EMAIL_EXISTS": "An account with this email already exists",
    "EMAIL_NOT_FOUND": "No account found with this email",
    "INVALID_PASSWORD": "Incorrect password",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect email or password",
    "USER_DISABLED": "This account has been disabled",
}
DEFAULT_AUTH_MESSAGE = "Authentication failed. Please try again."


class SessionState(str, Enum):
    UNRESOLVED = "unresolved"
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"


class AuthSession:
    def __init__(self):
        self.state = SessionState.UNRESOLVED
        self.user: Optional[UserSession] = None
        self.profile: Optional[UserProfile] = None
        self._listeners: List[Callable[["AuthSession"], None]] = []

    @property
    def is_resolved(self) -> bool:
        return self.state is not SessionState.UNRESOLVED

    @property
    def is_signed_in(self) -> bool:
        return self.state is SessionState.SIGNED_IN

    def resolve(self, user: Optional[UserSession], profile: Optional[UserProfile] = None) -> None:
        self.user = user
        self.profile = profile if user else None
        self.state = SessionState.SIGNED_IN if user else SessionState.SIGNED_OUT
        for callback in list(self._listeners):
            callback(self)

    def subscribe(self, callback: Callable[["AuthSession"], None]) -> Callable[[], None]:
        """Register a session-changed listener; fires at once if already resolved."""
        self._listeners.append(callback)
        if self.is_resolved:
            callback(self)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def require_user(self, message: str = "Please sign in first") -> UserSession:
        if self.user is None:
            raise ValidationError(message)
        return self.user

    def is_profile_complete(self) -> bool:
        return bool(self.profile and self.profile.is_profile_complete)

    def display_name(self) -> str:
        if self.profile and self.profile.username:
            return self.profile.username
        if self.user and self.user.display_name:
            return self.user.display_name
        return ANONYMOUS_LABEL


def validate_credentials(email: str, password: str, confirm_password: Optional[str] = None) -> None:
    """Form checks run before any provider call. confirm_password is only given on sign-up."""
    if confirm_password is not None and password != confirm_password:
        raise ValidationError("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not _EMAIL_RE.match((email or "").strip()):
        raise ValidationError("Please enter a valid email address")


def friendly_auth_message(err: ProviderError) -> str:
    return _FRIENDLY.get(err.code or "", DEFAULT_AUTH_MESSAGE)


class AuthService:
    def __init__(self, identity: IdentityProvider, database: DocumentDatabase,
                 session: AuthSession, users_collection: str = "users"):
        self.identity = identity
        self.database = database
        self.session = session
        self.users_collection = users_collection

    def fetch_profile(self, uid: str) -> Optional[UserProfile]:
        try:
            data = self.database.get_document(self.users_collection, uid)
        except ProviderError:
            log.exception("profile fetch failed for uid=%s", uid)
            return None
        if data is None:
            return None
        return UserProfile.model_validate({**data, "uid": data.get("uid") or uid})

    def _complete_sign_in(self, user: UserSession) -> UserSession:
        self.session.resolve(user, self.fetch_profile(user.uid))
        log.info("signed in uid=%s via %s", user.uid, user.provider)
        return user

    def _call(self, fn, *args) -> UserSession:
        try:
            return fn(*args)
        except ProviderError as e:
            raise AuthError(friendly_auth_message(e), code=e.code) from e

    def sign_in_with_email(self, email: str, password: str) -> UserSession:
        validate_credentials(email, password)
        user = self._call(self.identity.sign_in_with_password, email.strip(), password)
        return self._complete_sign_in(user)

    def sign_up_with_email(self, email: str, password: str, confirm_password: str) -> UserSession:
        validate_credentials(email, password, confirm_password)
        user = self._call(self.identity.register_with_password, email.strip(), password)
        return self._complete_sign_in(user)

    def sign_in_with_google(self, id_token: str) -> UserSession:
        if not id_token:
            raise ValidationError("Google sign-in did not return a token")
        user = self._call(self.identity.sign_in_with_popup, id_token)
        return self._complete_sign_in(user)

    def sign_out(self) -> None:
        if self.session.user is not None:
            self.identity.sign_out(self.session.user)
        self.session.resolve(None)
