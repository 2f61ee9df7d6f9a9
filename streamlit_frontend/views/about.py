# views/about.py
import streamlit as st


def render(ctx):
    st.markdown('<div class="big-title">🤝 About</div>', unsafe_allow_html=True)
    st.write(
        "Destitutes of India is a community platform where anyone can share a geotagged photo of a person "
        "living in destitution. Every post carries a location so that NGOs, volunteers and local bodies "
        "can see where help is needed."
    )
    st.markdown(
        "- Photos are shared for awareness, not as a promise of direct aid\n"
        "- You can post anonymously; your account is still recorded for moderation\n"
        "- Respect the dignity and consent of the people you photograph"
    )
