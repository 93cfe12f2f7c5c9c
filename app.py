"""
FleetLedger - Vehicle Income & Expense Tracker
Main Streamlit application entry point.
"""

import logging
import streamlit as st
from config.settings import APP_NAME, LOG_LEVEL
from database.connection import is_configured
from views.ledger import show_ledger

logging.basicConfig(level=LOG_LEVEL)

# Page configuration
st.set_page_config(
    page_title=APP_NAME,
    page_icon="📒",
    layout="wide"
)

def main():
    """Main application function."""

    # Check if Supabase is configured
    if not is_configured():
        st.error("⚠️ Supabase is not configured. Check your .env file.")
        st.info("""
        **Setup instructions:**

        1. Copy `.env.example` to `.env`
        2. Fill in your Supabase credentials:
           - `SUPABASE_URL`: your Supabase project URL
           - `SUPABASE_KEY`: your Supabase anon/public key
        3. Restart the application
        """)
        return

    show_ledger()

if __name__ == "__main__":
    main()
