# widgets.py
# Streamlit-side adapters for the core package: toasts, camera widget, browser geolocation.
import io
import json
import logging

import streamlit as st
from PIL import Image
from streamlit_js_eval import streamlit_js_eval

from destitutes.geolocation import GeolocationOptions

log = logging.getLogger(__name__)


# ---------- Notifications ----------
class ToastNotifier:
    def info(self, message: str) -> None:
        st.toast(message, icon="📍")

    def success(self, message: str) -> None:
        st.toast(message, icon="✅")

    def error(self, message: str) -> None:
        st.toast(message, icon="⚠️")


# ---------- Camera ----------
class WidgetStream:
    """
    The live stream is the st.camera_input widget: it is rendered only while
    the stream is active, and stop() drops its value so the browser lets go
    of the camera when the widget unmounts.
    """

    def __init__(self, key: str):
        self.key = key
        self.stopped = False

    def active_tracks(self) -> int:
        return 0 if self.stopped else 1

    def grab_frame(self):
        shot = st.session_state.get(self.key)
        if shot is None:
            return None
        return Image.open(io.BytesIO(shot.getvalue()))

    def stop(self) -> None:
        st.session_state.pop(self.key, None)
        self.stopped = True


class WidgetCamera:
    def __init__(self, key: str = "camera_stream"):
        self.key = key
        self._opened = 0

    def open(self, facing_mode: str = "environment", width: int = 1280, height: int = 720) -> WidgetStream:
        # fresh widget key per stream so a stale frame never leaks into a new session
        self._opened += 1
        return WidgetStream(f"{self.key}_{self._opened}")


# ---------- Geolocation ----------
_GEO_JS = """
new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve({error: {code: 2, message: "Geolocation is not supported by this browser"}});
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (p) => resolve({coords: {latitude: p.coords.latitude, longitude: p.coords.longitude,
                             accuracy: p.coords.accuracy}, timestamp: p.timestamp}),
    (e) => resolve({error: {code: e.code, message: e.message}}),
    %s
  );
})
"""


def browser_position(options: GeolocationOptions, attempt: int):
    """PositionSource backed by streamlit_js_eval. None until the browser answers."""
    js_options = json.dumps({
        "enableHighAccuracy": options.enable_high_accuracy,
        "timeout": options.timeout_ms,
        "maximumAge": options.maximum_age_ms,
    })
    return streamlit_js_eval(js_expressions=_GEO_JS % js_options, key=f"geolocation_{attempt}")


# ---------- Google sign-in ----------
def google_id_token():
    """ID token from Streamlit's OIDC login, when [auth] exposes it."""
    user = getattr(st, "user", None)
    if user is None or not user.get("is_logged_in"):
        return None
    tokens = getattr(user, "tokens", None) or {}
    return tokens.get("id")


def google_login_configured() -> bool:
    try:
        return "auth" in st.secrets
    except FileNotFoundError:
        return False
