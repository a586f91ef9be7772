import logging

import streamlit as st

import config
import views
from database import Database, DataClientError
from navigation import VIEW_LABELS, Navigation, View

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger("equip_track")

# Page Configuration
st.set_page_config(
    page_title=config.APP_NAME,
    page_icon="📦",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_database():
    return Database()


db = get_database()

# --- SESSION STATE MANAGEMENT ---
if 'nav' not in st.session_state: st.session_state.nav = Navigation()
assets, employees = views.get_snapshots(db)

# --- STYLING ---
st.markdown("""
    <style>
        div[data-testid="stMetric"] { background-color: #ffffff; border: 1px solid #dcdcdc; border-radius: 12px; padding: 12px; box-shadow: 0 2px 4px rgba(0,0,0,0.08); }
        section[data-testid="stSidebar"] { border-right: 1px solid #dcdcdc; }
        footer {visibility: hidden;}
    </style>
""", unsafe_allow_html=True)

# --- SIDEBAR ---
st.sidebar.title(f"📦 {config.APP_NAME}")
st.sidebar.caption(config.APP_VERSION)
st.sidebar.divider()

nav = st.session_state.nav
choice = st.sidebar.radio(
    "Navigation",
    [v.value for v in View],
    key="nav_choice",
    format_func=lambda v: VIEW_LABELS[View(v)],
)
nav.dispatch(choice)

st.sidebar.markdown("---")
if st.sidebar.button("🔄 Refresh Data"):
    for snap in (assets, employees):
        snap.loaded = False

# --- DATA ---
try:
    assets.ensure_loaded()
    employees.ensure_loaded()
except DataClientError as e:
    logger.error("Initial fetch failed: %s", e)
    st.error(f"Could not reach the database: {e}")
    st.stop()

if 'flash' in st.session_state:
    st.toast(st.session_state.pop('flash'))

# --- ROUTING ---
PAGES = {
    View.DASHBOARD: views.show_dashboard,
    View.ALL_ASSETS: views.show_main_assets,
    View.ACCESSORIES: views.show_accessories,
    View.EMPLOYEES: views.show_employees,
    View.SETTINGS: views.show_settings,
}
PAGES[nav.current](db)
