# views/donate.py
import streamlit as st

from destitutes.donation import PaymentOutcome, format_inr
from destitutes.errors import AppError, ConfigError

CUSTOM_KEY = "donation_custom"


def _on_custom(ctx):
    try:
        ctx.donation.set_custom(st.session_state.get(CUSTOM_KEY, ""))
    except AppError as e:
        ctx.notifier.error(str(e))
        st.session_state[CUSTOM_KEY] = ctx.donation.custom_amount


def _on_preset(ctx, amount):
    ctx.donation.select_preset(amount)
    st.session_state[CUSTOM_KEY] = ""


def _handle_callback(ctx):
    params = st.query_params.to_dict()
    if "razorpay_payment_link_id" not in params:
        return
    try:
        outcome = ctx.checkout().verify_callback(params)
    except ConfigError as e:
        ctx.notifier.error(str(e))
        return
    finally:
        st.query_params.clear()

    if outcome is PaymentOutcome.SUCCESS:
        st.success("Payment successful! Thank you for your donation.")
        st.balloons()
    elif outcome is PaymentOutcome.CANCELLED:
        ctx.notifier.error("Payment cancelled")
    else:
        ctx.notifier.error("Payment failed")


def render(ctx):
    st.markdown('<div class="big-title">❤️ Support Our Mission</div>', unsafe_allow_html=True)
    st.markdown('<p class="subtle">Your donation helps us maintain the platform and expand our reach '
                'to help more people in need.</p>', unsafe_allow_html=True)

    _handle_callback(ctx)
    form = ctx.donation

    st.markdown("#### Choose an amount")
    cols = st.columns(3)
    for i, amount in enumerate(form.presets):
        cols[i % 3].button(
            format_inr(amount), key=f"preset_{amount}", on_click=_on_preset, args=(ctx, amount),
            type="primary" if (not form.custom_amount and form.selected_amount == amount) else "secondary",
            use_container_width=True,
        )
    st.text_input("Or enter a custom amount (₹)", key=CUSTOM_KEY, on_change=_on_custom, args=(ctx,),
                  placeholder=f"Up to {format_inr(form.maximum)}")

    st.markdown(f"**You are donating {format_inr(form.final_amount)}**")
    if st.button("Donate now", type="primary"):
        try:
            amount = form.validate()
            with st.spinner("Preparing secure checkout..."):
                checkout = ctx.checkout().create_session(amount)
        except ConfigError:
            ctx.notifier.error("Payment gateway not available")
        except AppError as e:
            ctx.notifier.error(str(e))
        else:
            st.session_state["checkout_url"] = checkout.url

    url = st.session_state.get("checkout_url")
    if url:
        st.link_button("Continue to Razorpay checkout", url, type="primary")
        st.caption("Payments are processed securely by Razorpay.")
