"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``campus_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from campus_app.app import main

st.set_page_config(layout="wide")

PAGES_DIR = Path(__file__).parent / "campus_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"campus_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover
        logging.getLogger(__name__).error("Failed importing page %s: %s", mod_name, e)

if __name__ == "__main__":
    main()
