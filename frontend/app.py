import streamlit as st
from config import APP_TITLE

st.set_page_config(
    page_title=APP_TITLE,
    layout="wide",
)

# -------------------------
# Header
# -------------------------
st.title(APP_TITLE)
st.caption("Build flashcard collections and study them, images included.")

st.markdown("---")

st.markdown(
    """
### 📚 How it works

- Cards hold a question, an answer, a topic and an optional image
- Images are encoded in the browser and uploaded together with the card
- Image bytes are kept in object storage; the card only keeps a reference
- A collection's images are downloaded in a single multipart response
"""
)

st.info(
    "👉 Use the **sidebar navigation**: **🃏 Cards** to manage cards, "
    "**🖼️ Collection** to view a collection's images."
)

st.sidebar.markdown("---")
st.sidebar.caption("Flashcards • Prototype UI")
