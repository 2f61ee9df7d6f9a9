# views/home.py
import streamlit as st

from views.feed import render_feed
from views.upload import upload_dialog


def render(ctx):
    st.markdown(
        """
        <div class="big-title">📷 Destitutes of India</div>
        <p class="subtle">Share geotagged photos to raise awareness about people living in destitution.</p>
        """,
        unsafe_allow_html=True,
    )

    flash = st.session_state.pop("upload_flash", None)
    if flash:
        st.success(flash)

    if ctx.session.is_signed_in:
        st.caption(f"Signed in as **{ctx.session.display_name()}**")
        if st.button("📷 Share a Photo", type="primary"):
            upload_dialog(ctx)
        else:
            # full rerun without the dialog: it was closed
            ctx.orchestrator.dismiss()
    else:
        st.info("Sign in to share a photo.")
        st.page_link(ctx.pages["auth"], label="Sign in or create an account", icon="🔑")

    st.divider()
    render_feed(ctx)
