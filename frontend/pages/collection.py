import streamlit as st
from requests import HTTPError

from api import fetch_collection_images

st.title("🖼️ Collection images")

collection_id = st.text_input("Collection ID", value=st.session_state.get("collection_id", ""))

if st.button("Load images", type="primary") and collection_id:
    with st.spinner("Fetching images..."):
        try:
            parts = fetch_collection_images(collection_id)
        except HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                st.warning("Collection not found.")
            else:
                st.error("Something went wrong, try again.")
            parts = None

    if parts is not None:
        if not parts:
            st.info("No card in this collection has an image.")
        cols = st.columns(3)
        for i, part in enumerate(parts):
            with cols[i % 3]:
                st.image(part.data, caption=part.content_id)
