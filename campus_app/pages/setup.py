"""Sign-in page: resolve the user's role and configure the narration credential."""

from __future__ import annotations

import streamlit as st

from campus_app.app import register_page
from campus_app.core.errors import AuthorizationError
from campus_app.core.narration import NarrationClient
from campus_app.pages._session import gemini_api_key, shared_backend


@register_page("Setup / Sign-in")
def setup_page():
    st.title("Sign in")
    st.caption("Profiles are looked up by user id; new ids are registered with the chosen role.")
    _, directory = shared_backend()

    uid = st.text_input("User ID", value=st.session_state.get("uid", ""))
    role = st.selectbox("Role for new profile", ["student", "admin"])
    key = st.text_input("Gemini API key (weekly report)", type="password", value=gemini_api_key() or "")
    sign_in = st.button("Sign in", type="primary")

    if sign_in:
        if not uid.strip():
            st.error("User ID required.")
            return
        uid = uid.strip()
        if uid not in directory.uids():
            directory.register(uid, role)
        try:
            user = directory.resolve(uid)
        except AuthorizationError as exc:
            st.error(str(exc))
            return
        st.session_state["uid"] = uid
        st.session_state["user"] = user
        st.session_state["narration_client"] = NarrationClient(key or None)
        st.success(f"Signed in as {uid} ({user.role}).")

    if st.session_state.get("user") is not None and st.button("Sign out"):
        st.session_state.pop("user", None)
        st.session_state.pop("narration_client", None)
        st.info("Signed out.")
