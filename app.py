"""
Guide Harvester - Streamlit Frontend
Import a published study guide into a study plan and browse the result.
"""

import streamlit as st
import pandas as pd
import json
import logging
import os
import subprocess
import tempfile
from datetime import datetime


# Install Playwright browsers on first run (for Streamlit Cloud)
@st.cache_resource
def install_playwright_browsers():
    """Install Playwright Chromium browser on first run."""
    from playwright.sync_api import sync_playwright, Error as PlaywrightError
    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(headless=True)
            browser.close()
            return True
    except PlaywrightError:
        pass

    result = subprocess.run(
        ["playwright", "install", "chromium"],
        capture_output=True,
        text=True,
        timeout=300
    )
    return result.returncode == 0


_playwright_available = install_playwright_browsers()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from guide_harvester import GuideImporter, HarvestConfig, PlanData
from guide_harvester.word_exporter import export_plan_docx

# Page configuration
st.set_page_config(
    page_title="Guide Harvester",
    page_icon="📚",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .stApp {
        background-color: #FFFFFF;
    }
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        color: #1E293B;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        font-size: 1rem;
        color: #64748B;
        margin-bottom: 2rem;
    }
    [data-testid="stMetric"] {
        background-color: #F8F9FB;
        border: 1px solid #E2E8F0;
        border-radius: 10px;
        padding: 0.75rem;
    }
</style>
""", unsafe_allow_html=True)


def init_session_state():
    """Initialize session state variables."""
    if 'import_response' not in st.session_state:
        st.session_state.import_response = None
    if 'import_logs' not in st.session_state:
        st.session_state.import_logs = []


def add_log(message: str):
    """Add a log message."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    st.session_state.import_logs.append(f"[{timestamp}] {message}")
    if len(st.session_state.import_logs) > 100:
        st.session_state.import_logs = st.session_state.import_logs[-100:]


def render_sidebar() -> HarvestConfig:
    """Render the sidebar and return the resulting configuration."""
    st.sidebar.markdown("## ⚙️ Import Settings")
    base = HarvestConfig.from_env()

    data_dir = st.sidebar.text_input("Data directory", value=base.data_dir)
    page_timeout = st.sidebar.number_input(
        "Page load timeout (s)", min_value=5, max_value=300,
        value=base.page_load_timeout_ms // 1000,
    )
    marker_timeout = st.sidebar.number_input(
        "Marker timeout (s)", min_value=5, max_value=300,
        value=base.marker_timeout_ms // 1000,
    )
    headless = st.sidebar.checkbox("Headless browser", value=base.headless)

    base.data_dir = data_dir
    base.page_load_timeout_ms = int(page_timeout * 1000)
    base.marker_timeout_ms = int(marker_timeout * 1000)
    base.headless = headless
    return base


def subjects_frame(plan: dict) -> pd.DataFrame:
    """One row per subject with its topic total and how many topics carry questions."""
    weights = plan.get('bancaTopicWeights', {})
    rows = []
    for subject in plan.get('subjects', []):
        subject_weights = weights.get(subject['id'], {})
        rows.append({
            'Subject': subject['subject'],
            'Topics': subject['total_topics_count'],
            'Weighted topics': sum(1 for v in subject_weights.values() if v),
            'Color': subject['color'],
        })
    return pd.DataFrame(rows)


def weights_frame(plan: dict, subject: dict) -> pd.DataFrame:
    weights = plan.get('bancaTopicWeights', {}).get(subject['id'], {})
    df = pd.DataFrame(
        [{'Topic': text, 'Questions': count} for text, count in weights.items()]
    )
    if not df.empty:
        df = df.sort_values('Questions', ascending=False)
    return df


def export_to_docx(plan: dict) -> bytes:
    """Render the plan to DOCX bytes for download."""
    tmp = tempfile.NamedTemporaryFile(suffix='.docx', delete=False)
    tmp.close()
    try:
        export_plan_docx(PlanData.from_dict(plan), tmp.name)
        with open(tmp.name, 'rb') as f:
            return f.read()
    finally:
        os.unlink(tmp.name)


def render_results(plan: dict):
    """Render the imported plan and download buttons."""
    st.markdown("---")
    st.markdown(f"## 📊 {plan.get('name') or 'Imported plan'}")
    if plan.get('cargo'):
        st.write(f"**Role:** {plan['cargo']}")
    if plan.get('banca'):
        st.write(f"**Board:** {plan['banca']}")

    subjects = plan.get('subjects', [])
    cols = st.columns(3)
    with cols[0]:
        st.metric("Subjects", len(subjects))
    with cols[1]:
        st.metric("Topics", sum(s['total_topics_count'] for s in subjects))
    with cols[2]:
        st.metric("Icon", "embedded" if plan.get('iconUrl') else "none")

    if subjects:
        st.markdown("### 📚 Subjects")
        st.dataframe(subjects_frame(plan), width="stretch")

        names = [s['subject'] for s in subjects]
        selected = st.selectbox("Topic weights for:", names)
        subject = subjects[names.index(selected)]
        st.dataframe(weights_frame(plan, subject), width="stretch")

    st.markdown("### 📥 Download")
    stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="📥 Download JSON",
            data=json.dumps(plan, indent=2, ensure_ascii=False),
            file_name=f"plan_{stamp}.json",
            mime="application/json"
        )
    with col2:
        st.download_button(
            label="📥 Download DOCX",
            data=export_to_docx(plan),
            file_name=f"plan_{stamp}.docx",
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document"
        )


def main():
    """Main application."""
    init_session_state()

    st.markdown('<p class="main-header">📚 Guide Harvester</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Turn a published study guide into a weighted study plan</p>',
        unsafe_allow_html=True
    )

    config = render_sidebar()

    if not _playwright_available:
        st.warning("Playwright Chromium is not installed; imports will fail.")

    owner = st.text_input("Owner", value=os.environ.get("GUIDE_USER", ""))
    col1, col2 = st.columns([4, 1])
    with col1:
        url = st.text_input(
            "Guide URL",
            placeholder="https://www.example.com/guias/...",
            label_visibility="collapsed"
        )
    with col2:
        import_button = st.button("🚀 Import", type="primary")

    if import_button:
        add_log(f"Starting import of {url}")
        importer = GuideImporter(config)
        importer.set_progress_callback(
            lambda done, total, name: add_log(f"Subject {done}/{total}: {name}")
        )
        with st.spinner("Importing guide..."):
            response = importer.handle_request({'guideUrl': url}, owner)
        st.session_state.import_response = response
        if 'error' in response:
            add_log(f"Error: {response['error']}")
        else:
            add_log(response['message'])

    response = st.session_state.import_response
    if response:
        if 'error' in response:
            st.error(response['error'])
        else:
            st.success(response['message'])
            render_results(response['plan'])

    if st.session_state.import_logs:
        with st.expander("📋 Import Logs", expanded=False):
            st.code("\n".join(st.session_state.import_logs[-50:]), language=None)


if __name__ == "__main__":
    main()
