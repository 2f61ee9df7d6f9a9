# destitutes/__init__.py
from .auth import AuthService, AuthSession, SessionState               # session context + sign-in flows
from .config import Settings, get_settings
from .errors import AppError, ConfigError, ProviderError, ValidationError
from .feed import FeedItem, FeedSubscription                             # live photo feed
from .geolocation import GeolocationOptions, GeolocationProbe
from .models import GeoPoint, ImagePayload, Post, UserProfile, UserSession
from .upload import UploadOrchestrator, UploadResult, UploadState       # share-a-photo flow

__all__ = [
    "AppError",
    "AuthService",
    "AuthSession",
    "ConfigError",
    "FeedItem",
    "FeedSubscription",
    "GeoPoint",
    "GeolocationOptions",
    "GeolocationProbe",
    "ImagePayload",
    "Post",
    "ProviderError",
    "SessionState",
    "Settings",
    "UploadOrchestrator",
    "UploadResult",
    "UploadState",
    "UserProfile",
    "UserSession",
    "ValidationError",
    "get_settings",
]
