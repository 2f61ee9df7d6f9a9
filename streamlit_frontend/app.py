# app.py
# streamlit run streamlit_frontend/app.py
import atexit
import logging

import streamlit as st

from destitutes.config import get_settings
from destitutes.errors import AppError
from destitutes.feed import FeedSubscription
from destitutes.firebase import build_providers
from destitutes.identity import FirebaseIdentity
from destitutes.logging_setup import configure_logging

from context import build_context, get_context, resolve_session
from views import about, auth, contact, donate, home, profile

log = logging.getLogger(__name__)

# ---------- Page config ----------
st.set_page_config(page_title="Destitutes of India", page_icon="📍", layout="centered")

# ---------- CSS ----------
st.markdown(
    """
    <style>
      .big-title {font-size: 2.2rem; font-weight: 800; margin-bottom: 0.25rem;}
      .subtle {opacity: 0.7; margin-top: 0; margin-bottom: 1rem;}
      div[data-testid="stFileUploader"] { margin-top: 0.25rem; }
    </style>
    """,
    unsafe_allow_html=True,
)

settings = get_settings()
configure_logging(settings.log_level)


# ---------- Providers (once per process) ----------
def _secret_service_account():
    try:
        if "serviceAccount" in st.secrets:  # Streamlit Cloud
            return dict(st.secrets["serviceAccount"])
    except FileNotFoundError:
        pass
    return None


@st.cache_resource(show_spinner=False)
def _providers():
    database, storage = build_providers(settings, _secret_service_account())
    identity = FirebaseIdentity(settings.firebase_api_key, request_uri=settings.public_base_url)
    # one live listener shared by every viewer, released at shutdown
    feed = FeedSubscription(database, settings.photos_collection, "createdAt", settings.feed_limit).open()
    atexit.register(feed.close)
    return identity, database, storage, feed


try:
    identity, database, storage, feed = _providers()
except (AppError, ValueError) as e:  # ValueError: malformed service account
    log.exception("provider setup failed")
    st.error(f"🔥 Firebase initialization failed: {e}")
    st.stop()

# ---------- Session context (once per browser session) ----------
ctx = get_context(lambda: build_context(settings, identity, database, storage, feed))
resolve_session(ctx)

# ---------- Navigation ----------
def _home(): home.render(ctx)
def _auth(): auth.render(ctx)
def _profile(): profile.render(ctx)
def _donate(): donate.render(ctx)
def _contact(): contact.render(ctx)
def _about(): about.render(ctx)


ctx.pages = {
    "home": st.Page(_home, title="Home", icon="🏠", url_path="home", default=True),
    "auth": st.Page(_auth, title="Sign in", icon="🔑", url_path="auth"),
    "profile": st.Page(_profile, title="Profile", icon="👤", url_path="profile"),
    "donate": st.Page(_donate, title="Donate", icon="❤️", url_path="donate"),
    "contact": st.Page(_contact, title="Contact", icon="✉️", url_path="contact"),
    "about": st.Page(_about, title="About", icon="🤝", url_path="about"),
}

with st.sidebar:
    if ctx.session.is_signed_in:
        st.caption(f"Signed in as **{ctx.session.display_name()}**")
        if not ctx.session.is_profile_complete():
            st.page_link(ctx.pages["profile"], label="Complete your profile", icon="⚠️")
        if st.button("Sign out"):
            ctx.orchestrator.reset()
            ctx.auth.sign_out()
            if getattr(st, "user", None) is not None and st.user.get("is_logged_in"):
                st.logout()
            st.rerun()

st.navigation(list(ctx.pages.values())).run()
