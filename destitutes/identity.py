# destitutes/identity.py
# Firebase Authentication through its REST API (identitytoolkit v1).
import logging
from typing import Optional
from urllib.parse import urlencode

import requests

from .errors import AuthError, ConfigError
from .models import UserSession

log = logging.getLogger(__name__)

IDENTITY_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{method}"


class FirebaseIdentity:
    def __init__(self, api_key: Optional[str], http: Optional[requests.Session] = None,
                 timeout: float = 15.0, request_uri: str = "http://localhost"):
        if not api_key:
            raise ConfigError("Missing required settings: DOI_FIREBASE_API_KEY")
        self.api_key = api_key
        self.http = http or requests.Session()
        self.timeout = timeout
        self.request_uri = request_uri

    def _post(self, method: str, payload: dict) -> dict:
        try:
            r = self.http.post(
                IDENTITY_URL.format(method=method),
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("accounts:%s unreachable: %s", method, e)
            raise AuthError("Could not reach the sign-in service", code="NETWORK_ERROR") from e

        try:
            data = r.json()
        except ValueError:
            data = {}

        if r.status_code >= 400 or "error" in data:
            # messages look like "EMAIL_EXISTS" or "WEAK_PASSWORD : Password should be ..."
            message = (data.get("error") or {}).get("message") or f"HTTP {r.status_code}"
            code = message.split(":")[0].strip()
            log.info("accounts:%s rejected: %s", method, code)
            raise AuthError(message, code=code)
        return data

    @staticmethod
    def _session(data: dict, provider: str) -> UserSession:
        return UserSession(
            uid=data["localId"],
            email=data.get("email"),
            display_name=data.get("displayName") or None,
            photo_url=data.get("photoUrl"),
            id_token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
            provider=provider,
        )

    def sign_in_with_password(self, email: str, password: str) -> UserSession:
        data = self._post("signInWithPassword", {"email": email, "password": password, "returnSecureToken": True})
        return self._session(data, "password")

    def register_with_password(self, email: str, password: str) -> UserSession:
        data = self._post("signUp", {"email": email, "password": password, "returnSecureToken": True})
        return self._session(data, "password")

    def sign_in_with_popup(self, id_token: str) -> UserSession:
        """Exchange a Google ID token (from the browser's Google sign-in) for a Firebase session."""
        data = self._post("signInWithIdp", {
            "postBody": urlencode({"id_token": id_token, "providerId": "google.com"}),
            "requestUri": self.request_uri,
            "returnIdpCredential": True,
            "returnSecureToken": True,
        })
        return self._session(data, "google.com")

    def sign_out(self, session: UserSession) -> None:
        # ID tokens are stateless; dropping them client-side is the whole sign-out
        log.info("signed out uid=%s", session.uid)
