"""Shared Streamlit session helpers (not a page)."""

from __future__ import annotations

import os

import streamlit as st

from campus_app.core.identity import UserDirectory
from campus_app.core.narration import NarrationClient
from campus_app.core.service import IssueService
from campus_app.core.store import IssueStore


@st.cache_resource
def shared_backend() -> tuple[IssueService, UserDirectory]:
    """One store and directory per server process, shared by every session."""
    store = IssueStore()
    return IssueService(store), UserDirectory()


def gemini_api_key() -> str | None:
    gemini_secrets = st.secrets.get("gemini", {})
    return (
        gemini_secrets.get("GEMINI_API_KEY")
        or st.secrets.get("GEMINI_API_KEY")
        or os.environ.get("GEMINI_API_KEY")
    )


def narration_client() -> NarrationClient:
    if "narration_client" not in st.session_state:
        st.session_state["narration_client"] = NarrationClient(gemini_api_key())
    return st.session_state["narration_client"]


def current_user():
    return st.session_state.get("user")
