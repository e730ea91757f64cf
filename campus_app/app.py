"""Application entry point: page registry and router."""

from __future__ import annotations

import streamlit as st

PAGES = {}

STUDENT_PAGES = ("Submit Issue", "My Issues")
ADMIN_PAGES = ("Admin Triage", "Weekly Report")


def register_page(label):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


def main():
    st.sidebar.title("Campus Issue Desk")
    pages = list(PAGES.keys())
    if not pages:
        st.write("No pages registered yet.")
        return
    user = st.session_state.get("user")
    if user is None:
        preferred_order = ["Setup / Sign-in"]
    elif user.is_admin:
        preferred_order = [*ADMIN_PAGES, "Setup / Sign-in"]
    else:
        preferred_order = [*STUDENT_PAGES, "Setup / Sign-in"]

    ordered = [name for name in preferred_order if name in pages]
    if not ordered:
        st.sidebar.caption("(Info) No pages available for this role.")
        return
    if user is not None:
        st.sidebar.caption(f"Signed in as {user.uid} ({user.role})")
    page = st.sidebar.selectbox("Page", ordered, index=0)
    PAGES[page]()


if __name__ == "__main__":
    main()
