# views/auth.py
import streamlit as st

from destitutes.errors import AppError
from widgets import google_login_configured


def _after_sign_in(ctx, message):
    ctx.notifier.success(message)
    target = "home" if ctx.session.is_profile_complete() else "profile"
    st.switch_page(ctx.pages[target])


def render(ctx):
    st.markdown('<div class="big-title">🔑 Welcome</div>', unsafe_allow_html=True)

    if ctx.session.is_signed_in:
        st.success(f"You are signed in as {ctx.session.user.email or ctx.session.display_name()}.")
        return

    mode = st.radio("Mode", ["Sign in", "Create account"], horizontal=True, label_visibility="collapsed")
    sign_up = mode == "Create account"

    with st.form("email_auth"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm password", type="password") if sign_up else None
        submitted = st.form_submit_button("Create account" if sign_up else "Sign in", type="primary")

    if submitted:
        try:
            with st.spinner("Signing in..."):
                if sign_up:
                    ctx.auth.sign_up_with_email(email, password, confirm)
                else:
                    ctx.auth.sign_in_with_email(email, password)
        except AppError as e:
            ctx.notifier.error(str(e))
        else:
            _after_sign_in(ctx, "Account created successfully!" if sign_up else "Successfully signed in!")

    if google_login_configured():
        st.divider()
        st.button("Continue with Google", on_click=st.login, args=("google",), use_container_width=True)
