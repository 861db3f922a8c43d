"""
Drill AI - Drilling Data Dashboard

A Streamlit frontend for uploading drilling spreadsheets per well, plotting
them by depth and chatting with the Drill AI assistant.
"""

import streamlit as st
import requests
import plotly.graph_objects as go
from typing import Optional, Dict, Any, List
from urllib.parse import quote
from uuid import uuid4
import json
import os


st.set_page_config(
    page_title="Drill AI Intelligence Platform",
    page_icon="🛢️",
    layout="wide",
    initial_sidebar_state="expanded"
)


# Configuration
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")

TABS = ["Drilling Monitoring", "Offset Wells Map", "Bit Summary"]

UPLOAD_TYPES = ["xlsx", "xls", "csv"]

STATUS_BADGES = {
    "Active": "🟢",
    "Drilling": "🔵",
    "Planning": "🟡",
    "Completed": "⚪",
    "Suspended": "🔴",
}


# Initialize session state
if 'selected_well' not in st.session_state:
    st.session_state.selected_well = None
if 'pending_delete' not in st.session_state:
    st.session_state.pending_delete = None
if 'uploader_key' not in st.session_state:
    st.session_state.uploader_key = 0


st.markdown("""
    <style>
    .block-container {
        padding-top: 2rem;
    }
    .well-meta {
        color: #6b7280;
        font-size: 0.85rem;
    }
    </style>
""", unsafe_allow_html=True)


def well_url(name: str) -> str:
    """Backend URL of a well; names may contain characters reserved in paths"""
    return f"{BACKEND_URL}/wells/{quote(name, safe='')}"


def _error_detail(response: requests.Response) -> str:
    try:
        return response.json().get("detail", "Unknown error")
    except ValueError:
        return f"Status {response.status_code}"


def check_backend_health() -> bool:
    """Check if backend is accessible"""
    try:
        response = requests.get(f"{BACKEND_URL}/", timeout=5)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


def get_wells() -> List[Dict[str, Any]]:
    """Get the well list"""
    try:
        response = requests.get(f"{BACKEND_URL}/wells", timeout=10)
        if response.status_code == 200:
            return response.json().get("wells", [])
        st.error(f"Failed to fetch wells: {_error_detail(response)}")
    except requests.exceptions.RequestException as e:
        st.error(f"Connection error: {str(e)}")
    return []


def add_well() -> Optional[Dict[str, Any]]:
    """Add a new well with the next default name"""
    try:
        response = requests.post(f"{BACKEND_URL}/wells", timeout=10)
        if response.status_code == 201:
            return response.json()
        st.error(f"Could not add well: {_error_detail(response)}")
    except requests.exceptions.RequestException as e:
        st.error(f"Connection error: {str(e)}")
    return None


def delete_well(name: str) -> Optional[Dict[str, Any]]:
    """Delete a well with its data and chat history"""
    try:
        response = requests.delete(well_url(name), timeout=30)
        if response.status_code == 200:
            return response.json()
        st.error(f"Delete failed: {_error_detail(response)}")
    except requests.exceptions.RequestException as e:
        st.error(f"Connection error: {str(e)}")
    return None


def upload_well_file(well_name: str, file) -> Optional[Dict[str, Any]]:
    """Upload a drilling spreadsheet into a well"""
    try:
        files = {"file": (file.name, file.getvalue(), file.type or "application/octet-stream")}
        response = requests.post(f"{well_url(well_name)}/upload", files=files, timeout=180)
        if response.status_code == 200:
            return response.json()
        st.error(f"Upload failed: {_error_detail(response)}")
    except requests.exceptions.RequestException as e:
        st.error(f"Connection error: {str(e)}")
    return None


def get_chart_series(well_name: str) -> Optional[Dict[str, Any]]:
    """Get chart-ready series for a well"""
    try:
        response = requests.get(f"{well_url(well_name)}/charts", timeout=30)
        if response.status_code == 200:
            return response.json()
        st.error(f"Failed to fetch chart data: {_error_detail(response)}")
    except requests.exceptions.RequestException as e:
        st.error(f"Connection error: {str(e)}")
    return None


def get_messages(well_name: str) -> List[Dict[str, Any]]:
    """Get a well's chat history"""
    try:
        response = requests.get(f"{well_url(well_name)}/messages", timeout=10)
        if response.status_code == 200:
            return response.json()
        st.error(f"Failed to fetch chat history: {_error_detail(response)}")
    except requests.exceptions.RequestException as e:
        st.error(f"Connection error: {str(e)}")
    return []


def send_chat(well_name: str, message: str, attachments: Optional[List[Dict[str, Any]]] = None) -> Optional[Dict[str, Any]]:
    """Send a chat message (and optional attachments) for a well"""
    try:
        payload = {"message": message, "attachments": attachments or []}
        response = requests.post(f"{well_url(well_name)}/chat", json=payload, timeout=60)
        if response.status_code == 200:
            return response.json()
        st.error(f"Chat failed: {_error_detail(response)}")
    except requests.exceptions.RequestException as e:
        st.error(f"Connection error: {str(e)}")
    return None


def rock_composition_figure(series: Dict[str, Any]) -> go.Figure:
    """Stacked bars of lithology percentages by depth"""
    fig = go.Figure()
    for field in series["rock_fields"]:
        fig.add_trace(go.Bar(
            x=series["depth"],
            y=series["rock_composition"].get(field, []),
            name=series["rock_labels"].get(field, field),
            marker_color=series["rock_colors"].get(field),
            hovertemplate=f"{field}: %{{y:.2f}}%<extra></extra>"
        ))
    fig.update_layout(
        barmode="stack",
        height=250,
        margin=dict(l=10, r=10, t=10, b=10),
        xaxis_title="Depth",
        yaxis_title="%",
        legend=dict(orientation="h")
    )
    return fig


def log_figure(series: Dict[str, Any], key: str, label: str, color: str) -> go.Figure:
    """Line chart of one log curve (DT or GR) by depth"""
    fig = go.Figure(go.Scatter(
        x=series["depth"],
        y=series[key],
        mode="lines",
        name=label,
        line=dict(color=color, width=2, shape="spline"),
        connectgaps=False,
        hovertemplate=f"{label}: %{{y:.3f}}<extra></extra>"
    ))
    fig.update_layout(
        height=250,
        margin=dict(l=10, r=10, t=10, b=10),
        xaxis_title="Depth",
        yaxis_title=label
    )
    return fig


def display_well_list(wells: List[Dict[str, Any]]):
    """Sidebar well list with add/select/delete"""
    st.sidebar.markdown("## Well List")

    if st.sidebar.button("➕ Add New Well", use_container_width=True):
        new_well = add_well()
        if new_well:
            st.session_state.selected_well = new_well["name"]
            st.rerun()

    for well in wells:
        name = well["name"]
        selected = name == st.session_state.selected_well
        badge = STATUS_BADGES.get(well["status"], "⚪")

        col1, col2 = st.sidebar.columns([5, 1])
        with col1:
            label = f"{'▶ ' if selected else ''}{name}"
            if st.button(label, key=f"select_{name}", use_container_width=True):
                st.session_state.selected_well = name
                st.session_state.pending_delete = None
                st.rerun()
        with col2:
            if len(wells) > 1 and st.button("🗑️", key=f"delete_{name}", help="Delete well"):
                st.session_state.pending_delete = name
                st.rerun()

        depth_text = f"{well['depth']:,.1f} ft" if well["depth"] > 0 else "No data"
        points_text = f" · {well['data_points']} data points" if well["data_points"] else ""
        st.sidebar.markdown(
            f"<div class='well-meta'>Depth: {depth_text} · {badge} {well['status']}{points_text}</div>",
            unsafe_allow_html=True
        )

        if st.session_state.pending_delete == name:
            st.sidebar.warning(
                f"Are you sure you want to delete {name}? "
                "This will remove all associated data and chat history."
            )
            confirm_col, cancel_col = st.sidebar.columns(2)
            with confirm_col:
                if st.button("Delete", key=f"confirm_delete_{name}", type="primary"):
                    if delete_well(name):
                        st.session_state.pending_delete = None
                        if st.session_state.selected_well == name:
                            st.session_state.selected_well = None
                        st.rerun()
            with cancel_col:
                if st.button("Cancel", key=f"cancel_delete_{name}"):
                    st.session_state.pending_delete = None
                    st.rerun()


def display_drilling_monitoring(well_name: str):
    """Charts for the selected well, or an empty state"""
    st.subheader(f"Drilling Monitoring - {well_name}")

    uploaded = st.file_uploader(
        "Upload drilling data (Excel or CSV)",
        type=UPLOAD_TYPES,
        key=f"monitor_upload_{well_name}_{st.session_state.uploader_key}"
    )
    if uploaded is not None:
        with st.spinner(f"Processing {uploaded.name}..."):
            result = upload_well_file(well_name, uploaded)
        if result:
            st.success(result["message"])
            st.session_state.uploader_key += 1
            st.rerun()

    series = get_chart_series(well_name)
    if not series or series.get("empty"):
        st.info(
            f"📊 No data available. Upload drilling data for {well_name} to see charts and analysis."
        )
        return

    st.markdown("#### 🪨 Rock Composition")
    st.plotly_chart(rock_composition_figure(series), use_container_width=True)

    st.markdown("#### 📏 DT")
    st.plotly_chart(log_figure(series, "dt", "DT", "#f472b6"), use_container_width=True)

    st.markdown("#### ☢️ GR")
    st.plotly_chart(log_figure(series, "gr", "GR", "#93c5fd"), use_container_width=True)


def display_chat(well: Dict[str, Any]):
    """Chat panel: history, attachment upload and message input"""
    well_name = well["name"]
    st.subheader("💬 Drill AI")

    messages = get_messages(well_name)
    history = st.container(height=520)
    with history:
        if not messages:
            with st.chat_message("assistant"):
                st.markdown(well["welcome"])
        for message in messages:
            with st.chat_message(message["role"]):
                st.markdown(message["content"])
                for attachment in message.get("attachments") or []:
                    st.caption(f"📎 {attachment['name']} ({attachment.get('size', 0) / 1024:.1f}KB)")

    attached = st.file_uploader(
        "Attach a spreadsheet",
        type=UPLOAD_TYPES,
        key=f"chat_upload_{well_name}_{st.session_state.uploader_key}"
    )
    prompt = st.chat_input(f"Ask about {well_name}...")

    if prompt is None and attached is None:
        return
    if prompt is None:
        st.caption("Type a message to send the attachment.")
        return

    attachments = []
    if attached is not None:
        # Attached spreadsheets also become the well's chart data
        result = upload_well_file(well_name, attached)
        attachments.append({
            "id": str(uuid4()),
            "name": attached.name,
            "type": attached.type or "",
            "size": attached.size,
            "content": json.dumps(result["data"]) if result else None
        })

    with st.spinner("Thinking..."):
        reply = send_chat(well_name, prompt, attachments)

    if reply:
        st.session_state.uploader_key += 1
        st.rerun()


def main():
    st.title("🛢️ Drill AI Intelligence Platform")

    if not check_backend_health():
        st.error(f"Cannot reach the backend at {BACKEND_URL}. Is it running?")
        st.stop()

    wells = get_wells()
    if not wells:
        st.stop()

    names = [well["name"] for well in wells]
    if st.session_state.selected_well not in names:
        st.session_state.selected_well = names[0]

    display_well_list(wells)

    well_name = st.session_state.selected_well
    current = next(well for well in wells if well["name"] == well_name)
    if current["data_points"]:
        st.caption(f"{well_name} · {current['data_points']} data points")
    else:
        st.caption(well_name)

    main_col, chat_col = st.columns([3, 2])

    with main_col:
        monitoring_tab, offset_tab, bit_tab = st.tabs(TABS)
        with monitoring_tab:
            display_drilling_monitoring(well_name)
        with offset_tab:
            st.info("Offset Wells Map - Coming Soon")
        with bit_tab:
            st.info("Bit Summary - Coming Soon")

    with chat_col:
        display_chat(current)


main()
