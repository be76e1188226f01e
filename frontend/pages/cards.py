import streamlit as st
from requests import HTTPError

from api import add_card, delete_card, update_card
from config import IMAGE_TYPES

st.title("🃏 Cards")
st.caption("Add, edit and remove cards in a collection.")

st.session_state.setdefault("collection_id", "")
collection_id = st.text_input("Collection ID", key="collection_id")

tab_add, tab_edit, tab_delete = st.tabs(["Add", "Edit", "Delete"])

with tab_add:
    with st.form("add-card", clear_on_submit=True):
        question = st.text_input("Question")
        answer = st.text_area("Answer")
        topic = st.text_input("Topic")
        image = st.file_uploader("Image (optional)", type=IMAGE_TYPES)
        submitted = st.form_submit_button("Add card", type="primary")

    if submitted:
        if not (collection_id and question and answer):
            st.warning("Collection, question and answer are required.")
        else:
            try:
                result = add_card(collection_id, question, answer, topic, image)
                st.success(result.get("message", "Card added"))
                if image is not None and not result.get("imageStored"):
                    st.warning("The card was saved, but its image could not be uploaded.")
            except HTTPError:
                st.error("Something went wrong, try again.")

with tab_edit:
    with st.form("update-card"):
        card_id = st.text_input("Card ID")
        question = st.text_input("New question")
        answer = st.text_area("New answer")
        topic = st.text_input("New topic")
        image = st.file_uploader("New image", type=IMAGE_TYPES)
        submitted = st.form_submit_button("Save changes")

    if submitted:
        try:
            update_card(collection_id, card_id, {"question": question, "answer": answer, "topic": topic}, image)
            st.success("Card updated")
        except HTTPError:
            st.error("Something went wrong, try again.")

with tab_delete:
    card_id = st.text_input("Card ID to delete")
    if st.button("Delete card"):
        try:
            delete_card(collection_id, card_id)
            st.success("Card deleted")
        except HTTPError:
            st.error("Something went wrong, try again.")
