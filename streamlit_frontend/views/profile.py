# views/profile.py
import streamlit as st

from destitutes.errors import AppError, ValidationError
from destitutes.profile import clean_phone, clean_username


def render(ctx):
    st.markdown('<div class="big-title">👤 Complete Your Profile</div>', unsafe_allow_html=True)
    st.markdown('<p class="subtle">Help us personalize your experience by providing a few more details.</p>',
                unsafe_allow_html=True)

    if not ctx.session.is_signed_in:
        st.info("Please sign in first.")
        st.page_link(ctx.pages["auth"], label="Sign in", icon="🔑")
        return

    profile = ctx.session.profile
    with st.form("profile"):
        username = st.text_input("Username", value=(profile.username if profile else "") or "",
                                 help="Letters, numbers and underscores, 3-20 characters")
        phone = st.text_input("Phone number", value=(profile.phone_number if profile else "") or "",
                              help="10 digits")
        submitted = st.form_submit_button("Save profile", type="primary")

    if submitted:
        try:
            with st.spinner("Saving..."):
                ctx.profiles.complete(clean_username(username), clean_phone(phone))
        except ValidationError as e:
            ctx.notifier.error(str(e))
        except AppError:
            ctx.notifier.error("Failed to save profile. Please try again.")
        else:
            ctx.notifier.success("Profile completed successfully!")
            st.switch_page(ctx.pages["home"])
