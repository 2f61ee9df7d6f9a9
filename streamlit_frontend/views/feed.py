# views/feed.py
import folium
import streamlit as st
from streamlit_folium import st_folium

REFRESH_SECONDS = 5
INDIA_CENTER = [20.5937, 78.9629]


def build_map(items):
    m = folium.Map(location=INDIA_CENTER, zoom_start=5)
    for item in items:
        loc = item.post.location
        folium.Marker(
            [loc.latitude, loc.longitude],
            popup=f"{item.label} · {item.posted}",
            tooltip=item.coordinates,
        ).add_to(m)
    if items:
        m.fit_bounds([[i.post.location.latitude, i.post.location.longitude] for i in items])
    return m


def _render_empty():
    st.markdown("### No photos uploaded yet")
    st.write(
        "This is where photos shared by our community will appear. Be the first to upload a photo "
        "and help raise awareness about destitute individuals in your area."
    )
    st.info(
        "**How to get started:**\n"
        "- Click *Share a Photo* to upload a photo\n"
        "- Add location details and description\n"
        "- Help raise awareness in your community"
    )


@st.fragment(run_every=REFRESH_SECONDS)
def render_feed(ctx):
    feed = ctx.feed
    feed.ensure_live()
    if not feed.loaded:
        st.caption("⏳ Loading photos...")
        return

    items = feed.items()
    if not items:
        _render_empty()
        return

    st.markdown("## Recent Photos")
    if st.toggle("Show on map", key="feed_map"):
        st_folium(build_map(items), height=420, use_container_width=True, returned_objects=[],
                  key=f"feed_map_{feed.version}")

    cols = st.columns(3)
    for i, item in enumerate(items):
        with cols[i % 3]:
            with st.container(border=True):
                st.image(item.post.image_ref.url, use_container_width=True)
                st.caption(f"👤 {item.label} · 🕒 {item.posted}")
                st.markdown(f"📍 [{item.coordinates}]({item.maps_url})")
                if item.post.description:
                    st.write(item.post.description)
