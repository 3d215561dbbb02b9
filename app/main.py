"""
Streamlit Frontend for Habit Tracker

The page users interact with daily: a task sidebar, a month grid of
checkboxes and two progress indicators.

DESIGN PRINCIPLES:
1. Every change goes through TrackerFlow (persisted and audited there)
2. The page re-renders entirely from TrackerFlow.grid() / progress()
3. Destructive actions (task deletion) need an explicit confirmation
4. Errors are shown, never swallowed
"""

import logging
from html import escape

import streamlit as st

from habit_tracker.calendar_utils import MONTH_NAMES
from habit_tracker.config import get_settings, validate_all_settings
from habit_tracker.models.tracker import MonthGrid, Progress
from habit_tracker.orchestrator import TrackerFlow, create_app_components
from habit_tracker.services.storage import CorruptStateError, StorageError


# Page configuration
st.set_page_config(
    page_title="Monthly Habit Tracker",
    page_icon="✅",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for a compact grid
st.markdown("""
<style>
    .day-header {
        text-align: center;
        line-height: 1.1;
    }
    .day-number {
        font-weight: bold;
    }
    .day-weekday {
        font-size: 0.75em;
        color: #6c757d;
    }
    .task-name {
        font-weight: 600;
        white-space: nowrap;
        overflow: hidden;
        text-overflow: ellipsis;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components() -> TrackerFlow:
    """Get or create the tracker flow (cached)."""
    logging.basicConfig(
        level=logging.DEBUG if get_settings().app.debug_mode else logging.INFO
    )
    try:
        flow, _ = create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize storage: {e}")
        flow, _ = create_app_components(use_storage=False)
    return flow


def main():
    """Main application entry point."""
    flow = get_components()

    if not flow.is_loaded:
        try:
            flow.load()
        except CorruptStateError as e:
            render_corrupt_data_page(flow, e)
            return
        except StorageError as e:
            st.error(f"Could not read your tracker data: {e}")
            return

    if "flash" in st.session_state:
        level, message = st.session_state.pop("flash")
        getattr(st, level)(message)

    render_sidebar(flow)
    render_settings_status()

    progress = flow.progress()
    grid = flow.grid()

    st.title(f"📅 {grid.title}")
    render_progress(progress)
    st.markdown("---")
    render_grid(flow, grid)


def render_corrupt_data_page(flow: TrackerFlow, error: CorruptStateError):
    """Explain why stored data was rejected and offer a fresh start."""
    st.title("⚠️ Tracker data could not be loaded")
    st.error(str(error))

    with st.expander("🔍 Details"):
        for issue in error.issues:
            st.markdown(f"- **{issue.field}** ({issue.severity}): {issue.message}")

    st.warning("Starting fresh replaces the stored tasks and completions.")
    if st.button("🗑️ Start fresh", type="primary"):
        try:
            flow.reset()
        except StorageError as e:
            st.error(f"Failed to save: {e}")
            return
        st.rerun()


def render_sidebar(flow: TrackerFlow):
    """Month selector, task entry and task list."""
    state = flow.state

    st.sidebar.title("✅ Habit Tracker")
    st.sidebar.markdown("---")

    month = st.sidebar.selectbox(
        "Month",
        options=list(range(12)),
        index=state.current_month,
        format_func=lambda m: MONTH_NAMES[m],
    )
    if month != state.current_month:
        flow.select_month(month)
        st.rerun()

    st.sidebar.markdown("### Tasks")

    with st.sidebar.form("add_task", clear_on_submit=True):
        name = st.text_input(
            "New task",
            placeholder="e.g., Exercise",
            help=f"Up to {state.max_tasks} tasks",
        )
        submitted = st.form_submit_button("➕ Add Task")

    if submitted:
        try:
            task, message = flow.add_task(name)
        except StorageError as e:
            st.sidebar.error(f"Failed to save: {e}")
        else:
            if task is None:
                st.sidebar.warning(message)
            else:
                st.session_state.flash = ("success", message)
                st.rerun()

    if not state.tasks:
        st.sidebar.info("No tasks yet. Add your first habit above.")
        return

    pending = st.session_state.get("pending_delete")

    for index, task in enumerate(state.tasks):
        col1, col2 = st.sidebar.columns([5, 1])
        col1.markdown(
            f'<div class="task-name" title="{escape(task.name)}">{escape(task.name)}</div>',
            unsafe_allow_html=True,
        )
        if col2.button("×", key=f"delete-{task.id}", help="Delete task"):
            st.session_state.pending_delete = task.id
            st.rerun()

        if pending == task.id:
            st.sidebar.warning(f'Delete task "{task.name}"?')
            yes, no = st.sidebar.columns(2)
            if yes.button("Delete", key=f"confirm-{task.id}", type="primary"):
                st.session_state.pop("pending_delete", None)
                try:
                    flow.delete_task(index)
                except (IndexError, StorageError) as e:
                    st.session_state.flash = ("error", f"Failed to delete task: {e}")
                st.rerun()
            if no.button("Cancel", key=f"cancel-{task.id}"):
                st.session_state.pop("pending_delete", None)
                st.rerun()


def render_settings_status():
    """Storage configuration status."""
    with st.sidebar.expander("⚙️ Settings"):
        status = validate_all_settings()
        for key, label in (("storage", "Storage"), ("app", "Application")):
            if status.get(key, False):
                st.success(f"✅ {label} settings OK")
            else:
                st.error(f"❌ {label}: {status.get(f'{key}_error', 'Not configured')}")
        st.caption(f"Data directory: {get_settings().storage.data_dir}")


def render_progress(progress: Progress):
    """Monthly and daily progress."""
    col1, col2 = st.columns(2)

    with col1:
        st.metric("This month", f"{progress.month.percentage}%")
        st.progress(progress.month.percentage / 100)
        st.caption(f"{progress.month.completed} / {progress.month.total} tasks")

    with col2:
        if progress.day.total:
            st.metric("Today", f"{progress.day.percentage}%")
            st.progress(progress.day.percentage / 100)
            st.caption(f"{progress.day.completed} / {progress.day.total} tasks")
        else:
            st.metric("Today", "—")
            st.caption("Select the current month to see today's progress")


def _on_toggle(flow: TrackerFlow, task_index: int, day: int, widget_key: str):
    """Checkbox callback: store the new value through the flow."""
    state = flow.state
    try:
        flow.toggle_completion(
            task_index,
            day,
            state.current_month,
            state.current_year,
            bool(st.session_state[widget_key]),
        )
    except (IndexError, ValueError, StorageError) as e:
        st.session_state.flash = ("error", f"Failed to update: {e}")


def render_grid(flow: TrackerFlow, grid: MonthGrid):
    """Calendar grid: one row of checkboxes per task."""
    if grid.is_empty:
        st.info("📋 Your tasks will appear here once you add them in the sidebar.")
        return

    widths = [3] + [1] * len(grid.days)

    header = st.columns(widths)
    for col, day in zip(header[1:], grid.days):
        col.markdown(
            f'<div class="day-header" title="{day.full_date}">'
            f'<div class="day-number">{day.day}</div>'
            f'<div class="day-weekday">{day.weekday}</div>'
            f'</div>',
            unsafe_allow_html=True,
        )

    for row in grid.rows:
        cols = st.columns(widths)
        cols[0].markdown(
            f'<div class="task-name" title="{escape(row.task_name)}">{escape(row.task_name)}</div>',
            unsafe_allow_html=True,
        )
        for col, day, cell in zip(cols[1:], grid.days, row.cells):
            widget_key = f"check-{row.task_id}-{cell.date_key}"
            col.checkbox(
                f"{row.task_name} on {day.full_date}",
                value=cell.checked,
                key=widget_key,
                help=day.full_date,
                label_visibility="collapsed",
                on_change=_on_toggle,
                args=(flow, row.task_index, cell.day, widget_key),
            )


if __name__ == "__main__":
    main()
