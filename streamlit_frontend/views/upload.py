# views/upload.py
# "Share a Photo" dialog driving the UploadOrchestrator.
import streamlit as st

from destitutes.models import DESCRIPTION_MAX_CHARS
from destitutes.upload import UploadState

WARNING_TEXT = (
    "By sharing this photo, you acknowledge that this platform is for awareness purposes only. "
    "Please ensure you have the individual's consent when possible and respect their dignity."
)
GUIDELINES = [
    "This platform is for raising awareness, not direct aid",
    "Respect the dignity and privacy of individuals",
    "Do not share photos that could cause harm or distress",
    "Consider the impact of your post on the community",
]


def _on_file(ctx, key):
    uploaded = st.session_state.get(key)
    if uploaded is None:
        return
    ctx.orchestrator.select_file(uploaded.name, uploaded.type, uploaded.getvalue())


def _on_description(ctx, key):
    # max_chars already stops the widget at the limit
    ctx.orchestrator.set_description(st.session_state.get(key, ""))


def _on_anonymous(ctx, key):
    ctx.orchestrator.set_anonymous(st.session_state.get(key, False))


def _render_capture(ctx):
    orch = ctx.orchestrator
    gen = ctx.upload_generation

    if orch.state is UploadState.CAPTURING and orch.capture_origin == "camera" and orch.camera:
        frame = st.camera_input("Take a photo", key=orch.camera.stream.key, label_visibility="collapsed")
        c1, c2 = st.columns(2)
        c1.button("📸 Use this photo", on_click=orch.capture_photo, disabled=frame is None,
                  use_container_width=True)
        c2.button("✖ Close camera", on_click=orch.cancel_capture, use_container_width=True)
        return

    st.markdown("#### Capture or Upload Photo")
    st.caption("Take a new photo or select from your gallery")
    c1, c2 = st.columns(2)
    with c1:
        st.button("📷 Take Photo", on_click=orch.start_camera, args=(ctx.camera,), use_container_width=True)
        if orch.camera_error:
            st.caption(f"⚠️ {orch.camera_error}")
    with c2:
        # new key once the image is dropped, so re-picking the same file fires on_change
        key = f"upload_file_{gen}_{orch.image_epoch}"
        st.file_uploader("Upload Photo", key=key, on_change=_on_file, args=(ctx, key),
                         label_visibility="collapsed")
    st.caption("Camera access requires HTTPS and user permission. If the camera doesn't work, upload a file instead.")


def _render_preview(ctx):
    orch = ctx.orchestrator
    if orch.image is None:
        return
    st.markdown("#### Preview")
    st.image(orch.image.preview, use_container_width=True)
    st.button("🗑 Remove image", on_click=orch.discard_image)


def _render_location(ctx):
    orch = ctx.orchestrator
    st.markdown("#### Location")
    if orch.location is not None:
        st.success("Location Captured")
        st.caption(f"Coordinates: {orch.location.display()}")
        return

    clicked = st.button("📍 Capture Current Location", disabled=orch.location_pending,
                        use_container_width=True)
    if clicked or orch.location_pending:
        # renders the (invisible) browser component; answers arrive on a later rerun
        fix = orch.request_location(ctx.probe)
        if fix is not None:
            st.rerun(scope="fragment")
        elif orch.location_pending:
            st.caption("Waiting for your browser's location permission...")


def _render_details(ctx):
    orch = ctx.orchestrator
    gen = ctx.upload_generation

    st.markdown("#### Description (Optional)")
    key = f"upload_desc_{gen}"
    st.text_area("Description", value=orch.description, max_chars=DESCRIPTION_MAX_CHARS, key=key,
                 placeholder="Add any additional details about this location...",
                 on_change=_on_description, args=(ctx, key), label_visibility="collapsed")

    key = f"upload_anon_{gen}"
    st.toggle("Post Anonymously", value=orch.is_anonymous, key=key, on_change=_on_anonymous, args=(ctx, key),
              help="Your identity will be hidden" if orch.is_anonymous else "Your name will be visible")


def _render_warning(ctx):
    orch = ctx.orchestrator
    st.markdown("### ⚠️ Post with Responsibility")
    st.write(WARNING_TEXT)
    st.markdown("\n".join(f"- {g}" for g in GUIDELINES))

    c1, c2 = st.columns(2)
    c1.button("Cancel", on_click=orch.cancel_warning, use_container_width=True, disabled=orch.busy)
    if c2.button("Confirm & Post", type="primary", use_container_width=True, disabled=orch.busy):
        with st.spinner("Uploading..."):
            result = orch.confirm()
        if result is not None:
            st.rerun()  # closes the dialog
        st.rerun(scope="fragment")


@st.dialog("Share a Photo", width="large")
def upload_dialog(ctx):
    orch = ctx.orchestrator
    if orch.state in (UploadState.CONFIRM_WARNING, UploadState.UPLOADING):
        _render_warning(ctx)
        return

    _render_capture(ctx)
    _render_preview(ctx)
    _render_location(ctx)
    _render_details(ctx)

    st.button("Share Photo", type="primary", on_click=orch.submit, disabled=not orch.can_submit,
              use_container_width=True)
