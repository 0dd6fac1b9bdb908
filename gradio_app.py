import dotenv
dotenv.load_dotenv(override=True)


import logging
import queue
from datetime import tzinfo

import gradio as gr

from bookmark_store import FileKeyValueStore
from conference_schedule.app import ENGINE_LOGGER_NAME, ScheduleEngine
from conference_schedule.engine import init_logging
from conference_schedule.messages import (
    NO_SESSIONS_MESSAGE,
    REFRESH_FAILED_MESSAGE,
    REFRESH_SKIPPED_MESSAGE,
    UPDATE_TITLE,
)
from conference_schedule.models import GroupResult, Session, UpdateStats
from conference_schedule.state import ALL


ENGINE_LOGGER_NAMES = [
    ENGINE_LOGGER_NAME,
    "SessionStore",
    "DiffEngine",
    "GroupingEngine",
    "FilterPipeline",
]
init_logging(name=ENGINE_LOGGER_NAME)

VIEW_LABELS = {"Schedule": "schedule", "My Schedule": "bookmarks"}
MAX_LOG_LINES = 200


class QueueLogHandler(logging.Handler):
    """Forwards log records to a queue as formatted strings for the UI."""

    def __init__(self, q: queue.Queue):
        super().__init__()
        self._queue = q
        self.setFormatter(
            logging.Formatter("[%(asctime)s] %(name)s | %(message)s", datefmt="%H:%M:%S")
        )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._queue.put(self.format(record))
        except Exception:
            self.handleError(record)


def _format_time(session: Session, tz: tzinfo) -> str:
    start = session.slot_start.astimezone(tz).strftime("%H:%M")
    end = session.slot_end.astimezone(tz).strftime("%H:%M")
    return f"{start} - {end}"


def _session_to_markdown(session: Session, tz: tzinfo, bookmarked: bool, live: bool) -> str:
    """One session card as Markdown."""
    marker = "★ " if bookmarked else ""
    now_badge = " 🔴 **Now**" if live else ""
    lines = [f"#### {marker}{session.title}{now_badge}"]
    meta = [_format_time(session, tz)]
    if session.room_name:
        meta.append(f"Room: {session.room_name}")
    if session.track:
        meta.append(f"`{session.track}`")
    lines.append(" | ".join(meta))
    if session.speakers:
        lines.append("Speakers: " + ", ".join(s.name for s in session.speakers if s.name))
    if session.description:
        desc = session.description
        lines.append(desc[:300] + ("…" if len(desc) > 300 else ""))
    links = []
    if session.resources_presentation:
        links.append(f"[Presentation]({session.resources_presentation})")
    if session.resources_slides:
        links.append(f"[Slides]({session.resources_slides})")
    if links:
        lines.append(" · ".join(links))
    return "\n\n".join(lines)


def _groups_to_markdown(groups: GroupResult, engine: ScheduleEngine) -> str:
    """Render day buckets as Markdown sections, or the empty-state message."""
    if not groups.by_day:
        return f"_{NO_SESSIONS_MESSAGE}_"
    live = set(groups.live_session_ids)
    out = []
    for day, day_sessions in groups.by_day.items():
        out.append(f"## {day}")
        for session in day_sessions:
            out.append(_session_to_markdown(session, engine.grouping.tz, engine.is_bookmarked(session.id), session.id in live))
        out.append("---")
    return "\n\n".join(out)


def _update_message(stats: UpdateStats) -> str:
    return UPDATE_TITLE + "\n" + "\n".join(stats.summary_lines())


def _filter_choices(values: list[str], all_label: str) -> list[tuple[str, str]]:
    return [(all_label, ALL)] + [(v, v) for v in values]


def _bookmark_choices(sessions: list[Session], tz: tzinfo) -> list[tuple[str, str]]:
    """[(label, session id as text), ...] for the bookmark picker."""
    return [
        (f"{s.slot_start.astimezone(tz).strftime('%m-%d %H:%M')} · {s.title}", str(s.id))
        for s in sessions
    ]


def _resolve_session_id(engine: ScheduleEngine, key: str):
    """Map the picker's text value back to the session's real id (int or str)."""
    for session in engine.sessions:
        if str(session.id) == key:
            return session.id
    return None


engine = ScheduleEngine(storage=FileKeyValueStore())
log_queue: queue.Queue = queue.Queue()
log_lines: list[str] = []
_queue_handler = QueueLogHandler(log_queue)
for logger_name in ENGINE_LOGGER_NAMES:
    logging.getLogger(logger_name).addHandler(_queue_handler)


def _drain_logs() -> str:
    while True:
        try:
            log_lines.append(log_queue.get_nowait())
        except queue.Empty:
            break
    del log_lines[:-MAX_LOG_LINES]
    return "\n".join(log_lines)


def render():
    """(schedule markdown, live banner, bookmark picker, logs) for the current engine state."""
    groups = engine.group()
    live_banner = gr.update(visible=groups.has_live_session)
    picker = gr.update(choices=_bookmark_choices(engine.sessions, engine.grouping.tz))
    return _groups_to_markdown(groups, engine), live_banner, picker, _drain_logs()


def _options_updates():
    options = engine.drop_stale_filters()
    state = engine.filter_state
    return (
        gr.update(choices=_filter_choices(options.days, "All Days"), value=state.day),
        gr.update(choices=_filter_choices(options.tracks, "All Tracks"), value=state.track),
        gr.update(choices=_filter_choices(options.rooms, "All Rooms"), value=state.room),
    )


def on_load():
    """Initial fetch. First load never reports changes."""
    engine.refresh()
    engine.flush()
    return (*_options_updates(), *render())


def on_refresh():
    """Re-fetch the schedule and report what changed against the data shown so far."""
    if engine.is_refreshing:
        gr.Info(REFRESH_SKIPPED_MESSAGE)
        return _options_updates()
    held = engine.sessions
    stats = engine.refresh()
    if stats is not None:
        gr.Info(_update_message(stats))
    elif held and engine.sessions is held:
        gr.Warning(REFRESH_FAILED_MESSAGE)
    return _options_updates()


def on_filter_change(search_term: str, day: str, track: str, room: str) -> None:
    """Record the selections; the timer renders once the debounce window has passed."""
    engine.set_filters(search_term=search_term or "", day=day or ALL, track=track or ALL, room=room or ALL)


def on_clear_filters():
    engine.reset_filters()
    return "", ALL, ALL, ALL


def on_tick():
    if not engine.tick():
        return gr.update(), gr.update(), gr.update(), gr.update()
    return render()


def on_view_change(label: str):
    engine.set_view(VIEW_LABELS.get(label, "schedule"))
    return render()


def on_toggle_bookmark(key: str | None):
    if key:
        session_id = _resolve_session_id(engine, key)
        if session_id is not None:
            engine.toggle_bookmark(session_id)
    return render()


def build_ui():
    layout_css = """
    .gradio-container { max-width: 100% !important; width: 100% !important; padding: 1rem 1.25rem !important; box-sizing: border-box !important; }
    .logs-wrap textarea { min-height: 20vh !important; max-height: 26vh !important; font-family: monospace; font-size: 0.85em; }
    """
    with gr.Blocks(title="Devcon Schedule", css=layout_css, fill_width=True) as demo:
        with gr.Row():
            gr.Markdown("# Devcon Schedule")
            view_radio = gr.Radio(choices=list(VIEW_LABELS), value="Schedule", show_label=False)
            refresh_btn = gr.Button("Refresh", variant="secondary")

        live_banner = gr.Markdown("🔴 A session is happening now", visible=False)

        with gr.Row():
            search_box = gr.Textbox(placeholder="Search sessions…", show_label=False, scale=2)
            day_dd = gr.Dropdown(choices=[("All Days", ALL)], value=ALL, show_label=False)
            track_dd = gr.Dropdown(choices=[("All Tracks", ALL)], value=ALL, show_label=False)
            room_dd = gr.Dropdown(choices=[("All Rooms", ALL)], value=ALL, show_label=False)
            clear_btn = gr.Button("Clear filters", size="sm")

        with gr.Row():
            bookmark_dd = gr.Dropdown(choices=[], label="Session", scale=3)
            bookmark_btn = gr.Button("Toggle bookmark", scale=1)

        schedule_md = gr.Markdown(f"_{NO_SESSIONS_MESSAGE}_")

        gr.Markdown("### Running logs")
        with gr.Group(elem_classes=["logs-wrap"]):
            logs_box = gr.Textbox(label="Logs", lines=10, max_lines=20, interactive=False)

        timer = gr.Timer(0.1)
        rendered = [schedule_md, live_banner, bookmark_dd, logs_box]
        filter_inputs = [search_box, day_dd, track_dd, room_dd]

        demo.load(
            fn=on_load,
            outputs=[day_dd, track_dd, room_dd, *rendered],
            concurrency_id="engine",
        )

        # Refresh runs on its own so filtering stays usable while the fetch is pending
        refresh_btn.click(
            fn=on_refresh,
            outputs=[day_dd, track_dd, room_dd],
            concurrency_id="refresh",
        )

        for component in filter_inputs:
            component.change(
                fn=on_filter_change,
                inputs=filter_inputs,
                outputs=None,
                concurrency_id="engine",
                show_progress="hidden",
            )

        clear_btn.click(fn=on_clear_filters, outputs=filter_inputs, concurrency_id="engine")

        timer.tick(fn=on_tick, outputs=rendered, concurrency_id="engine", show_progress="hidden")

        view_radio.change(fn=on_view_change, inputs=[view_radio], outputs=rendered, concurrency_id="engine")

        bookmark_btn.click(fn=on_toggle_bookmark, inputs=[bookmark_dd], outputs=rendered, concurrency_id="engine")

    return demo


def main():
    demo = build_ui()
    demo.queue()
    demo.launch(inbrowser=False)


if __name__ == "__main__":
    main()
