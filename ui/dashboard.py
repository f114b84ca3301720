# ui/dashboard.py
import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import streamlit as st
import requests
import pandas as pd
from screening.config import load_settings
from ui.api_client import read_json

# -------------------- CONFIG --------------------
API_URL = os.getenv("API_URL") or load_settings().api_url
st.set_page_config(page_title="Domain Resume Screening", page_icon="🧠", layout="wide")
st.title("🤖 Domain Resume Screening")

st.markdown(
    "Upload PDF resumes, pick a domain, and let the LLM score each candidate against the "
    "domain's required skills. Every result can be exported as a Word report."
)

# -------------------- SESSION STATE --------------------
if "api_url" not in st.session_state:
    st.session_state.api_url = API_URL

# Persist the latest batch so results survive reruns (e.g. report downloads)
if "last_results" not in st.session_state:
    st.session_state.last_results = None

if "domain_cache" not in st.session_state:
    st.session_state.domain_cache = {}

# Generated report bytes keyed by file name
if "reports" not in st.session_state:
    st.session_state.reports = {}


def fetch_domains() -> dict:
    if not st.session_state.domain_cache:
        try:
            resp = requests.get(f"{st.session_state.api_url}/api/domain-skills", timeout=30)
            body = read_json(resp) if resp.status_code == 200 else {}
            st.session_state.domain_cache = {} if body.get("success") is False else body
        except requests.exceptions.RequestException:
            st.session_state.domain_cache = {}
    return st.session_state.domain_cache


def request_report(result: dict):
    """Ask the API to render a report, then pull the .docx back for download."""
    r = requests.post(f"{st.session_state.api_url}/api/generate-report", json=result, timeout=60)
    r.raise_for_status()
    info = read_json(r)
    doc = requests.get(f"{st.session_state.api_url}{info['downloadUrl']}", timeout=60)
    doc.raise_for_status()
    return info["downloadUrl"].rsplit("/", 1)[-1], doc.content


# -------------------- TABS --------------------
tab1, tab2 = st.tabs(["📤 Screen Resumes", "🧾 Domain Skills"])

# ==================== TAB 1: Screen Resumes ====================
with tab1:
    domains = fetch_domains()
    if not domains:
        st.warning(f"⚠️ Could not load domains from {st.session_state.api_url}. Is the API running?")
    else:
        with st.form("screen_form", clear_on_submit=False):
            domain = st.selectbox("Domain", options=list(domains.keys()))
            st.caption(f"Required skills: {domains.get(domain, '')}")
            resume_files = st.file_uploader("Upload Resumes (PDF)", type=["pdf"], accept_multiple_files=True)
            submitted = st.form_submit_button("🔍 Screen Resumes")

        if submitted:
            if not resume_files:
                st.warning("Please upload at least one resume.")
            else:
                files = [("files", (f.name, f.getvalue(), "application/pdf")) for f in resume_files]
                with st.spinner(f"⏳ Screening {len(files)} resume(s) for {domain}..."):
                    try:
                        r = requests.post(
                            f"{st.session_state.api_url}/api/analyze",
                            data={"domain": domain},
                            files=files,
                            timeout=90 * len(files),
                        )
                    except requests.exceptions.RequestException as e:
                        st.error(f"❌ Connection error: {e}")
                        st.stop()

                body = read_json(r)
                if r.status_code == 200 and body.get("success"):
                    st.session_state.last_results = body["results"]
                    st.session_state.reports = {}
                    st.success(f"✅ {body.get('message', 'Done')}")
                else:
                    st.error(f"❌ Screening failed: {body.get('error', r.text)}")

    results = st.session_state.get("last_results")
    if results:
        st.markdown("### 📊 Results")
        table = pd.DataFrame({
            "File": [res["fileName"] for res in results],
            "Domain": [res["domain"] for res in results],
            "Match Score": [res["matchScore"] for res in results],
            "Selected": ["YES" if res["selected"] else "NO" for res in results],
        })
        st.table(table)

        for res in results:
            icon = "✅" if res["selected"] else "❌"
            with st.expander(f"{icon} {res['fileName']} — {res['matchScore']}/100"):
                col1, col2 = st.columns(2)
                with col1:
                    st.markdown("#### 💪 Key Strengths")
                    for s in res["keyStrengths"] or ["—"]:
                        st.markdown(f"- {s}")
                with col2:
                    st.markdown("#### 🧩 Missing Skills")
                    for s in res["missingSkills"] or ["—"]:
                        st.markdown(f"- {s}")

                with st.expander("📜 Full Analysis", expanded=False):
                    st.text(res["fullAnalysis"])

                key = res["fileName"]
                if st.button("📝 Generate Report", key=f"report_{key}"):
                    try:
                        st.session_state.reports[key] = request_report(res)
                    except (requests.exceptions.RequestException, KeyError) as e:
                        st.error(f"❌ Report generation failed: {e}")
                if key in st.session_state.reports:
                    name, content = st.session_state.reports[key]
                    st.download_button(
                        "⬇️ Download Report",
                        data=content,
                        file_name=name,
                        mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                        key=f"download_{key}",
                    )

# ==================== TAB 2: Domain Skills ====================
with tab2:
    st.subheader("Domain Skill Profiles")
    domains = fetch_domains()
    if domains:
        st.table(pd.DataFrame({
            "Domain": list(domains.keys()),
            "Required Skills": list(domains.values()),
        }))
    else:
        st.warning("⚠️ No domains available.")
