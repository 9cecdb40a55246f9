"""Seedble - skills management dashboard.

Streamlit entry point: personal statistics, review notifications, knowledge
circles, AI skill insights and suggestions, and the skill self-assessment
form. Projects and peer reviews live under ``pages/``.
"""

import logging
import time

import streamlit as st
from dotenv import load_dotenv

load_dotenv()

from seedble.advisor import skill_suggestions
from seedble.assessment import SkillResponse, initial_responses
from seedble.engine.statistics import mark_all_read, mark_read, read_notification_ids, unread_count
from seedble.errors import SeedbleError
from seedble.runtime import get_app_context
from seedble.settings import load_settings

logging.basicConfig(level=load_settings().log_level)
logger = logging.getLogger(__name__)


def select_current_user(ctx) -> str | None:
    """Sidebar user picker; the chosen id is kept in session state."""
    users = ctx.store.list_candidate_users()
    if not users:
        st.sidebar.info("No users yet.")
        return None
    labels = {u.id: f"{u.full_name} ({u.role})" if u.role else u.full_name for u in users}
    ids = list(labels)
    current = st.session_state.get("current_user_id")
    index = ids.index(current) if current in ids else 0
    chosen = st.sidebar.selectbox("👤 Current user", ids, index=index, format_func=labels.get)
    st.session_state.current_user_id = chosen
    return chosen


def render_statistics(ctx, user_id: str) -> None:
    stats = ctx.reviews.user_statistics(user_id)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Skills", stats.skills_count)
    col2.metric("Assessments", stats.assessments_count)
    col3.metric("Projects", stats.projects_count)
    col4.metric("Pending reviews", stats.pending_reviews_count)


def render_notifications(ctx, user_id: str) -> None:
    """Review notifications; read state lives in the session, per user."""
    read_state = st.session_state.setdefault("read_notifications", {})
    notes = ctx.reviews.notifications(user_id, read_state.get(user_id, set()))
    unread = unread_count(notes)

    header, action = st.columns([4, 1])
    header.subheader(f"🔔 Notifications ({unread} unread)" if unread else "🔔 Notifications")
    if unread and action.button("Mark all read"):
        read_state[user_id] = read_notification_ids(mark_all_read(notes))
        st.rerun()
    if not notes:
        st.caption("No notifications.")
        return

    for note in notes:
        icon = "📝" if note.type == "review_assigned" else "📬"
        with st.container(border=True):
            col1, col2 = st.columns([5, 1])
            with col1:
                st.markdown(f"{icon} **{note.title}**" + ("" if note.read else " 🔵"))
                st.caption(f"{note.message} · {note.timestamp:%Y-%m-%d %H:%M}")
            if not note.read and col2.button("Mark read", key=f"read_{note.id}"):
                read_state[user_id] = read_notification_ids(mark_read(notes, note.id))
                st.rerun()


def render_circles(ctx) -> None:
    st.subheader("🌱 Knowledge circles")
    circles = ctx.store.list_knowledge_circles()
    if not circles:
        st.caption("No knowledge circles yet.")
        return
    cols = st.columns(min(len(circles), 3))
    for i, circle in enumerate(circles):
        with cols[i % len(cols)]:
            st.markdown(f"### {circle.icon} {circle.name}")
            st.caption(circle.description)
            st.write(f"**{circle.member_count}** members")


def render_insights(ctx, user_id: str) -> None:
    st.subheader("💡 Skill insights")
    if st.button("Generate insights"):
        with st.spinner("Analysing your skills..."):
            st.session_state.insights = ctx.assessments.insights(user_id)
    for insight in st.session_state.get("insights", []):
        badge = {"high": "🔴", "medium": "🟠", "low": "🟢"}[insight.priority]
        with st.container(border=True):
            st.markdown(f"{badge} **{insight.title}**")
            st.write(insight.description)
            if insight.action:
                st.caption(f"➡️ {insight.action}")


def render_suggestions(ctx, user_id: str) -> None:
    user = ctx.store.get_user(user_id)
    st.subheader(f"🧩 Suggested skills for {user.role or 'your role'}")
    if st.button("Suggest skills"):
        with st.spinner("Looking up relevant skills..."):
            st.session_state.suggestions = skill_suggestions(user.role or "Developer", advisor=ctx.advisor)
    suggestions = st.session_state.get("suggestions")
    if suggestions is None:
        return
    cols = st.columns(3)
    for col, (label, items) in zip(cols, [
        ("Technical", suggestions.technical),
        ("Soft", suggestions.soft),
        ("Process", suggestions.process),
    ]):
        with col:
            st.markdown(f"**{label}**")
            for item in items:
                st.write(f"{item.name} ({item.confidence}%)")
                st.caption(item.reason)


def render_assessment(ctx, user_id: str) -> None:
    st.subheader("📋 Skill self-assessment")
    skills = ctx.store.list_skills()
    if not skills:
        st.caption("The skill catalog is empty.")
        return

    with st.form(key="assessment_form"):
        defaults = initial_responses(skills)
        responses: dict[str, SkillResponse] = {}
        for skill in skills:
            col1, col2, col3 = st.columns([2, 1, 1])
            with col1:
                st.markdown(f"**{skill.name}**")
                st.caption(skill.category)
            with col2:
                level = st.slider("Level", 1, 5, defaults[skill.id].level, key=f"lvl_{skill.id}")
            with col3:
                interest = st.slider("Interest", 1, 5, defaults[skill.id].interest, key=f"int_{skill.id}")
            responses[skill.id] = SkillResponse(level=level, interest=interest)
        submitted = st.form_submit_button("✅ Complete assessment")

    if submitted:
        started_at = st.session_state.pop("assessment_started_at", time.time())
        try:
            assessment = ctx.assessments.start(user_id)
            done = ctx.assessments.submit(assessment.id, responses, int(time.time() - started_at))
            st.success(f"Assessment completed: {done.skills_evaluated} skills evaluated")
        except SeedbleError as e:
            st.error(f"Assessment failed: {e}")
    else:
        st.session_state.setdefault("assessment_started_at", time.time())


def main():
    st.set_page_config(
        page_title="Seedble",
        page_icon="🌱",
        layout="wide",
    )

    st.title("🌱 Seedble")
    st.caption("Skills management: assessments, team recommendations and peer reviews")

    try:
        ctx = get_app_context()
    except SeedbleError as e:
        st.error(f"Failed to start: {e}")
        st.stop()

    with st.sidebar:
        st.header("⚙️ Settings")
        st.caption(f"Data file: `{ctx.settings.data_path}`")
        st.caption("AI advisor: " + ("✅ enabled" if ctx.advisor else "⚪ templated fallbacks"))

    user_id = select_current_user(ctx)
    if user_id is None:
        st.stop()

    render_statistics(ctx, user_id)
    st.divider()
    render_notifications(ctx, user_id)
    st.divider()
    render_circles(ctx)
    st.divider()
    render_insights(ctx, user_id)
    st.divider()
    render_suggestions(ctx, user_id)
    st.divider()
    with st.expander("Skill self-assessment", expanded=False):
        render_assessment(ctx, user_id)


main()
