import logging
import time
import uuid
from typing import Any, Dict, List

import streamlit as st

from config import settings
from cerebro.errors import CerebroError
from cerebro.services import build_services
from cerebro.tools.retriever.player_profiles import PlayerProfileRetriever

logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)

st.set_page_config(page_title="CerebroChat", page_icon="🏀", layout="wide")
st.markdown("<h2>🏀 CerebroChat</h2><p>Scouting answers grounded in the player database.</p>", unsafe_allow_html=True)
st.divider()


@st.cache_resource
def get_services():
    return build_services(profiles=PlayerProfileRetriever())


# Session state init
if "messages" not in st.session_state:
    st.session_state.messages: List[Dict[str, Any]] = [
        {"role": "assistant", "content": "Hi! Ask about a player, a ranking, or request a scouting report."}
    ]
if "session_id" not in st.session_state:
    st.session_state.session_id = uuid.uuid4().hex
if "pending_question" not in st.session_state:
    st.session_state.pending_question = None

# Sidebar with examples
EXAMPLES = {
    "Best PG by assists": "Who is the best PG by assists?",
    "Most effective centers": "Who are the most effective centers?",
    "Top 5 SF by true shooting": "Top 5 small forwards by true shooting",
    "Scouting report": "Write me a scouting report for that player",
}

with st.sidebar:
    st.subheader("Actions")
    if st.button("🧹 Clear Chat"):
        st.session_state.messages = [{"role": "assistant", "content": "Chat cleared. Ask another question!"}]
        st.session_state.session_id = uuid.uuid4().hex
        st.session_state.pending_question = None
        st.rerun()
    st.markdown("#### Quick Examples")
    for label, question in EXAMPLES.items():
        if st.button(label):
            st.session_state.pending_question = question
            st.rerun()


# Render existing history
for msg in st.session_state.messages:
    with st.chat_message(msg["role"], avatar=("💡" if msg["role"] == "assistant" else "👤")):
        st.markdown(msg["content"])
        if msg.get("debug"):
            with st.expander("Details", expanded=False):
                st.markdown(f"**Tool used:** `{msg['debug']['toolUsed']}`")
                st.json(msg["debug"]["evidence"])


def handle_question(q: str):
    st.session_state.messages.append({"role": "user", "content": q})
    with st.chat_message("user", avatar="👤"):
        st.write(q)

    with st.chat_message("assistant", avatar="💡"):
        placeholder = st.empty()
        try:
            placeholder.markdown("_Thinking..._")
            out = get_services().chat_agent.invoke(q, session_id=st.session_state.session_id)
            acc = ""
            for line in out["reply"].splitlines(keepends=True):
                acc += line
                placeholder.markdown(acc + "▌")
                time.sleep(0.015)
            placeholder.markdown(acc)
            st.session_state.messages.append({
                "role": "assistant",
                "content": acc,
                "debug": {"toolUsed": out["toolUsed"], "evidence": out["evidence"]},
            })
        except CerebroError as e:
            err = f"**Error:** {e}"
            placeholder.markdown(err)
            st.session_state.messages.append({"role": "assistant", "content": err})


# Process pending example (auto-run)
if st.session_state.pending_question:
    pq = st.session_state.pending_question
    st.session_state.pending_question = None
    handle_question(pq)

# Chat input (manual entry)
user_query = st.chat_input("Ask a scouting question…")
if user_query:
    handle_question(user_query)
