import os
import requests
import streamlit as st

API_BASE_DEFAULT = os.getenv("API_BASE", "http://localhost:8000")

# Streamlit expects page_title instead of title
st.set_page_config(page_title="URL Shortener", layout="centered")

st.title("URL Shortener")
st.caption("Enter a URL to shorten it via the FastAPI backend.")

with st.expander("Settings", expanded=False):
    api_base = st.text_input("API base URL", value=API_BASE_DEFAULT, help="Backend base URL")
api_base = api_base.rstrip("/")


def _error_detail(response: requests.Response) -> str:
    try:
        return response.json().get("detail")
    except ValueError:
        return response.text


long_url = st.text_input("Long URL", placeholder="https://example.com/very/long/path")
custom_code = st.text_input("Custom code (optional)", placeholder="promo")
use_expiry = st.checkbox("Set expiry", value=True)
expire_days = st.number_input("Expire in days", min_value=1, value=7, disabled=not use_expiry)

if st.button("Shorten", type="primary"):
    if not long_url.strip():
        st.error("Please provide a URL to shorten.")
    else:
        payload = {"url": long_url.strip()}
        if use_expiry:
            payload["expires_in_days"] = int(expire_days)
        if custom_code.strip():
            payload["custom_code"] = custom_code.strip()
        try:
            response = requests.post(f"{api_base}/api/shorten", json=payload, timeout=10)
            if response.ok:
                data = response.json()
                st.success("Short URL created")
                st.code(data["short_url"])
                st.markdown(f"[Open shortened link]({data['short_url']})")
                if data.get("expires_at"):
                    st.caption(f"Expires at {data['expires_at']} UTC")
            else:
                st.error(f"Backend error ({response.status_code}): {_error_detail(response)}")
        except requests.RequestException as exc:
            st.error(f"Request failed: {exc}")

st.divider()

with st.expander("URL Statistics", expanded=False):
    try:
        stats_response = requests.get(f"{api_base}/api/stats", timeout=10)
        stats_response.raise_for_status()
        stats = stats_response.json()
        cols = st.columns(4)
        cols[0].metric("Total URLs", stats["total_urls"])
        cols[1].metric("Total clicks", stats["total_clicks"])
        cols[2].metric("Active", stats["active_urls"])
        cols[3].metric("Expired", stats["expired_urls"])
        if stats["recent_urls"]:
            st.dataframe(stats["recent_urls"], use_container_width=True)
        else:
            st.info("No URLs yet.")
    except requests.RequestException as exc:
        st.error(f"Could not load statistics: {exc}")

    if st.button("Clean up expired URLs"):
        try:
            cleanup_response = requests.post(f"{api_base}/api/cleanup", timeout=30)
            cleanup_response.raise_for_status()
            st.success(f"Deleted {cleanup_response.json()['deleted_count']} expired URLs")
        except requests.RequestException as exc:
            st.error(f"Cleanup failed: {exc}")
