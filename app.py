import streamlit as st
from exposure_config import APP_INFO, LOG_LEVEL
from exposure_ui import exposure_ui
from logging_config import setup_logging

setup_logging(LOG_LEVEL)
st.set_page_config(page_title=f"{APP_INFO['name']} - Exposure Calculator", layout="wide")

exposure_ui()
