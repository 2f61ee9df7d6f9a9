# views/contact.py
import streamlit as st

from destitutes.contact import MESSAGE_MAX_CHARS, ContactForm
from destitutes.errors import AppError, ConfigError


def render(ctx):
    st.markdown('<div class="big-title">✉️ Get in Touch</div>', unsafe_allow_html=True)
    st.markdown("<p class=\"subtle\">Have questions, suggestions, or want to collaborate? "
                "We'd love to hear from you.</p>", unsafe_allow_html=True)

    with st.form("contact", clear_on_submit=False):
        name = st.text_input("Name")
        email = st.text_input("Email")
        subject = st.text_input("Subject")
        message = st.text_area("Message", max_chars=MESSAGE_MAX_CHARS)
        submitted = st.form_submit_button("Send message", type="primary")

    if not submitted:
        return
    try:
        with st.spinner("Sending..."):
            ctx.relay().send(ContactForm(name=name, email=email, subject=subject, message=message))
    except ConfigError:
        ctx.notifier.error("The contact form is not available right now.")
    except AppError as e:
        ctx.notifier.error(str(e))
    else:
        ctx.notifier.success("Message sent successfully! We'll get back to you soon.")
        st.success("Thank you! Your message has been sent.")
