# context.py
# Per-browser-session wiring. One AppContext lives in st.session_state and is
# passed explicitly to every view.
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import streamlit as st

from destitutes.auth import AuthService, AuthSession
from destitutes.config import Settings
from destitutes.contact import FormRelay
from destitutes.donation import DonationForm, RazorpayCheckout
from destitutes.errors import AppError
from destitutes.feed import FeedSubscription
from destitutes.geolocation import GeolocationOptions, GeolocationProbe
from destitutes.profile import ProfileService
from destitutes.upload import UploadOrchestrator, UploadResult
from widgets import ToastNotifier, WidgetCamera, browser_position, google_id_token

log = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    notifier: ToastNotifier
    session: AuthSession
    auth: AuthService
    profiles: ProfileService
    orchestrator: UploadOrchestrator
    probe: GeolocationProbe
    camera: WidgetCamera
    feed: FeedSubscription
    donation: DonationForm
    pages: Dict[str, object] = field(default_factory=dict)
    upload_generation: int = 0
    _checkout: Optional[RazorpayCheckout] = None
    _relay: Optional[FormRelay] = None

    def upload_completed(self, result: UploadResult) -> None:
        # new widget keys for the next upload, message for the page behind the dialog
        self.upload_generation += 1
        st.session_state["upload_flash"] = "Photo uploaded successfully!"

    def checkout(self) -> RazorpayCheckout:
        """Raises ConfigError when Razorpay keys are not set."""
        if self._checkout is None:
            s = self.settings
            self._checkout = RazorpayCheckout(
                s.razorpay_key_id, s.razorpay_key_secret, currency=s.donation_currency,
                callback_url=f"{s.public_base_url.rstrip('/')}/donate",
            )
        return self._checkout

    def relay(self) -> FormRelay:
        if self._relay is None:
            self._relay = FormRelay(self.settings.contact_relay_url)
        return self._relay


def build_context(settings: Settings, identity, database, storage, feed: FeedSubscription) -> AppContext:
    notifier = ToastNotifier()
    session = AuthSession()
    auth = AuthService(identity, database, session, users_collection=settings.users_collection)
    orchestrator = UploadOrchestrator(
        session, database, storage, notifier,
        photos_collection=settings.photos_collection,
        jpeg_quality=settings.jpeg_quality,
    )
    ctx = AppContext(
        settings=settings,
        notifier=notifier,
        session=session,
        auth=auth,
        profiles=ProfileService(database, session, users_collection=settings.users_collection),
        orchestrator=orchestrator,
        probe=GeolocationProbe(browser_position, GeolocationOptions(
            timeout_ms=settings.geolocation_timeout_ms,
            maximum_age_ms=settings.geolocation_max_age_ms,
        )),
        camera=WidgetCamera(),
        feed=feed,
        donation=DonationForm(settings.donation_presets, settings.donation_default, settings.donation_max),
    )
    orchestrator.on_complete = ctx.upload_completed
    resolve_session(ctx)
    return ctx


def resolve_session(ctx: AppContext) -> None:
    """Settle the session: a Google login carried by Streamlit signs in, otherwise signed out."""
    if ctx.session.is_signed_in:
        return
    token = google_id_token()
    if token and st.session_state.get("google_token_tried") != token:
        st.session_state["google_token_tried"] = token
        try:
            ctx.auth.sign_in_with_google(token)
            return
        except AppError as e:
            log.warning("google session exchange failed: %s", e)
            ctx.notifier.error(str(e))
    if not ctx.session.is_resolved:
        ctx.session.resolve(None)


def get_context(factory) -> AppContext:
    if "ctx" not in st.session_state:
        st.session_state["ctx"] = factory()
    return st.session_state["ctx"]


