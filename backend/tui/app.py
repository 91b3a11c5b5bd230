"""
Worktime dashboard - Textual application

Four tabs (dashboard, history chart, edit history, focus time) over one
TrackerContext. Every mutation goes through ``handlers.dispatch`` so the UI
only ever sees response models; failures become notifications.
"""

from typing import Any, Callable, Dict, List, Optional

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Static, TabbedContent, TabPane

from core.aggregator import worked_minutes
from core.context import TrackerContext
from core.logger import get_logger
from core.timeparse import format_time
from handlers import dispatch
from models.base import OperationResponse
from models.entities import DayRecord, DaySummary
from tui.charts import LEGEND, format_minutes, render_bars
from tui.screens import ConfirmExitModal, EditPromptModal
from tui.views import (
    EditTarget,
    ViewId,
    ViewState,
    next_view,
    view_for_number,
)

logger = get_logger(__name__)

# Edit target -> (command, request field)
EDIT_COMMANDS = {
    EditTarget.START: ("set_start", "time"),
    EditTarget.END: ("set_end", "time"),
    EditTarget.MEETING_NAME: ("start_meeting", "name"),
}

# Actions that must not fire while a prompt is open
MAIN_SCREEN_ACTIONS = {
    "edit_start",
    "edit_end",
    "start_meeting",
    "end_meeting",
    "start_focus",
    "end_focus",
    "next_view",
    "show_view",
    "cursor_up",
    "cursor_down",
    "request_quit",
}


class WorktimeApp(App):
    """Terminal dashboard for one tracked workday"""

    TITLE = "Worktime"

    CSS = """
    EditPromptModal, ConfirmExitModal {
        align: center middle;
    }
    #edit-modal, #exit-modal {
        width: 60;
        height: auto;
        border: thick $accent;
        background: $surface;
        padding: 1 2;
    }
    .modal-title {
        margin-bottom: 1;
    }
    .view-body {
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("s", "edit_start", "Start"),
        Binding("e", "edit_end", "End"),
        Binding("m", "start_meeting", "Meeting"),
        Binding("M", "end_meeting", "End meeting"),
        Binding("f", "start_focus", "Focus"),
        Binding("F", "end_focus", "End focus"),
        Binding("tab", "next_view", "Next tab", priority=True),
        Binding("1", "show_view(1)", show=False),
        Binding("2", "show_view(2)", show=False),
        Binding("3", "show_view(3)", show=False),
        Binding("4", "show_view(4)", show=False),
        Binding("up", "cursor_up", show=False, priority=True),
        Binding("down", "cursor_down", show=False, priority=True),
        Binding("q", "request_quit", "Quit"),
    ]

    def __init__(self, ctx: TrackerContext) -> None:
        super().__init__()
        self.ctx = ctx
        self.active_view = ViewId.DASHBOARD
        self.view_states: Dict[ViewId, ViewState] = {view: ViewState() for view in ViewId}
        self.edit_target = EditTarget.NOT_EDITING
        self._history: List[DayRecord] = []
        self._history_notice = ""
        self._window: List[DaySummary] = []
        self._tick_timer = None
        self._renderers: Dict[ViewId, Callable[[], str]] = {
            ViewId.DASHBOARD: self._render_dashboard,
            ViewId.HISTORY_CHART: self._render_history_chart,
            ViewId.EDIT_HISTORY: self._render_edit_history,
            ViewId.FOCUS: self._render_focus,
        }

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with TabbedContent(initial=ViewId.DASHBOARD.value):
            for view in ViewId:
                with TabPane(view.title, id=view.value):
                    with VerticalScroll():
                        yield Static("", id=f"{view.value}-body", classes="view-body")

        yield Footer()

    def on_mount(self) -> None:
        self.ctx.scheduler.add_listener(self._on_projection)
        self._tick_timer = self.set_interval(self.ctx.tick_interval, self._on_tick)
        self._reload_history()
        self.refresh_views()

    def on_unmount(self) -> None:
        self.ctx.scheduler.remove_listener(self._on_projection)

    # ============ Ticks ============

    def _on_tick(self) -> None:
        # A completed minute refreshes through the projection listener
        if not self.ctx.scheduler.tick() and self.active_view == ViewId.DASHBOARD:
            self.refresh_view(ViewId.DASHBOARD)

    def _on_projection(self, projection: DaySummary) -> None:
        self.refresh_view(ViewId.DASHBOARD)
        self.refresh_view(ViewId.FOCUS)

    # ============ Rendering ============

    def refresh_views(self) -> None:
        for view in ViewId:
            self.refresh_view(view)

    def refresh_view(self, view: ViewId) -> None:
        try:
            body = self.query_one(f"#{view.value}-body", Static)
        except NoMatches:
            # Not mounted yet, or the app is shutting down
            return
        body.update(self._renderers[view]())

    def _chart_width(self) -> int:
        return max(40, self.size.width - 6)

    def _render_dashboard(self) -> str:
        response = dispatch(self.ctx, "status")
        status = response.data
        if status is None:
            return f"[red]{escape(response.message)}[/red]"
        lines = [
            f"[bold]{status.day}[/bold]   now {format_time(self.ctx.now())}   ({status.phase})",
            "",
            f"Start: {status.start or '--:--'}   End: {status.end or '--:--'}   "
            f"Projected end: {status.projected_end or '--:--'}",
        ]

        if status.meeting_running:
            lines.append(
                f"[yellow]Meeting '{escape(status.meeting_name or '')}' since {status.meeting_start} "
                f"({status.meeting_elapsed_minutes} min)[/yellow]"
            )
        if status.focus_running:
            lines.append(
                f"[cyan]Focus time since {status.focus_start} "
                f"({status.focus_elapsed_minutes} min)[/cyan]"
            )

        lines.extend(["", "[bold]Meetings[/bold]"])
        if status.meetings:
            for meeting in status.meetings:
                lines.append(
                    f"  {format_time(meeting.start)}-{format_time(meeting.end)}  "
                    f"{escape(meeting.name)} ({meeting.duration_minutes} min)"
                )
        else:
            lines.append("  [dim]No meetings yet[/dim]")

        if status.projection is not None:
            lines.extend(["", "[bold]Today[/bold]"])
            lines.extend(render_bars([status.projection], self._chart_width()))

        lines.extend(["", f"[bold]Last {self.ctx.window_size} days[/bold]"])
        lines.extend(render_bars(self._window, self._chart_width()))
        return "\n".join(lines)

    def _render_history_chart(self) -> str:
        response = dispatch(self.ctx, "window_summaries")
        lines = [f"[bold]Last {self.ctx.window_size} days[/bold]", ""]
        if not response.success:
            lines.extend([f"[red]{escape(response.message)}[/red]", ""])
        lines.extend(render_bars(response.data or [], self._chart_width()))
        lines.extend(["", f"[dim]{LEGEND}[/dim]"])
        return "\n".join(lines)

    def _render_edit_history(self) -> str:
        lines: List[str] = []
        if self._history_notice:
            lines.extend([f"[red]{self._history_notice}[/red]", ""])
        if not self._history:
            lines.append("[dim]No saved days[/dim]")
            return "\n".join(lines)

        selected = self.view_states[ViewId.EDIT_HISTORY].selected_index
        for index, record in enumerate(self._history):
            marker = ">>" if index == selected else "  "
            row = f"{marker} {record.date}  {format_time(record.start)}  {format_time(record.end)}"
            lines.append(f"[yellow]{row}[/yellow]" if index == selected else row)

        lines.extend(["", *_day_detail(self._history[selected])])
        return "\n".join(lines)

    def _render_focus(self) -> str:
        running, minutes = self.ctx.focus_cache.read()
        lines = ["[bold]Focus time[/bold]", ""]
        if running:
            lines.append(f"[cyan]Focus time running: {format_minutes(minutes)}[/cyan]")
        else:
            lines.append("No focus time!")

        intervals = self.ctx.session.focus_intervals
        if intervals:
            lines.extend(["", "Today"])
            for interval in intervals:
                lines.append(
                    f"  {format_time(interval.start)}-{format_time(interval.end)}  "
                    f"{interval.duration_minutes} min"
                )
            lines.append(f"  Total {format_minutes(self.ctx.session.focus_total_minutes)}")
        return "\n".join(lines)

    def _reload_history(self) -> None:
        response = dispatch(self.ctx, "history")
        self._history = list(response.data or [])
        self._history_notice = "" if response.success else response.message
        # Dashboard chart is cached here; the store is not re-read on every tick
        self._window = list(dispatch(self.ctx, "window_summaries").data or [])
        self.view_states[ViewId.EDIT_HISTORY].move(0, len(self._history))

    # ============ Commands ============

    def _run(self, command: str, payload: Optional[Dict[str, Any]] = None) -> OperationResponse:
        response = dispatch(self.ctx, command, payload)
        if not response.success:
            self.notify(response.message, severity="warning")
        self.refresh_view(ViewId.DASHBOARD)
        self.refresh_view(ViewId.FOCUS)
        return response

    def check_action(self, action: str, parameters: tuple) -> Optional[bool]:
        if action in MAIN_SCREEN_ACTIONS and isinstance(self.screen, ModalScreen):
            return False
        return True

    def _prompt(self, target: EditTarget, initial: str = "") -> None:
        self.edit_target = target
        self.push_screen(EditPromptModal(target, initial), callback=self._on_prompt_result)

    def _on_prompt_result(self, value: Optional[str]) -> None:
        target, self.edit_target = self.edit_target, EditTarget.NOT_EDITING
        if value is None or target not in EDIT_COMMANDS:
            return
        command, field = EDIT_COMMANDS[target]
        self._run(command, {field: value})

    def action_edit_start(self) -> None:
        start = self.ctx.session.start
        self._prompt(EditTarget.START, format_time(start) if start is not None else "")

    def action_edit_end(self) -> None:
        end = self.ctx.session.end
        self._prompt(EditTarget.END, format_time(end) if end is not None else format_time(self.ctx.now()))

    def action_start_meeting(self) -> None:
        if self.ctx.session.is_meeting_running:
            self.notify("A meeting is already running", severity="warning")
            return
        self._prompt(EditTarget.MEETING_NAME)

    def action_end_meeting(self) -> None:
        self._run("end_meeting")

    def action_start_focus(self) -> None:
        self._run("start_focus")

    def action_end_focus(self) -> None:
        self._run("end_focus")

    # ============ Navigation ============

    def _show(self, view: ViewId) -> None:
        self.query_one(TabbedContent).active = view.value

    def action_next_view(self) -> None:
        self._show(next_view(self.active_view))

    def action_show_view(self, number: int) -> None:
        self._show(view_for_number(number))

    def on_tabbed_content_tab_activated(self, event: TabbedContent.TabActivated) -> None:
        self.active_view = ViewId(event.pane.id)
        if self.active_view in (ViewId.HISTORY_CHART, ViewId.EDIT_HISTORY):
            self._reload_history()
        self.refresh_view(self.active_view)

    def _move_selection(self, delta: int) -> None:
        if self.active_view != ViewId.EDIT_HISTORY:
            return
        self.view_states[ViewId.EDIT_HISTORY].move(delta, len(self._history))
        self.refresh_view(ViewId.EDIT_HISTORY)

    def action_cursor_up(self) -> None:
        self._move_selection(-1)

    def action_cursor_down(self) -> None:
        self._move_selection(1)

    # ============ Exit ============

    def action_request_quit(self) -> None:
        self.push_screen(
            ConfirmExitModal(self.ctx.session.is_closable()),
            callback=self._on_exit_choice,
        )

    def _on_exit_choice(self, choice: Optional[str]) -> None:
        if choice == "save":
            response = self._run("save_day")
            if not response.success:
                # Session is kept; the notification carries the reason
                return
            logger.info(response.message)
            self.exit()
        elif choice == "discard":
            logger.info(f"Quit without saving {self.ctx.session.day}")
            self.exit()


def _day_detail(record: DayRecord) -> List[str]:
    lines = [
        f"[bold]{record.date}[/bold]",
        f"  Worked {format_minutes(worked_minutes(record))} ({format_time(record.start)}-{format_time(record.end)})",
    ]
    if record.meetings:
        lines.append("  Meetings")
        for meeting in record.meetings:
            lines.append(
                f"    {format_time(meeting.start)}-{format_time(meeting.end)}  "
                f"{escape(meeting.name)} ({meeting.duration_minutes} min)"
            )
    if record.focus_intervals:
        lines.append("  Focus time")
        for interval in record.focus_intervals:
            lines.append(
                f"    {format_time(interval.start)}-{format_time(interval.end)}  "
                f"{interval.duration_minutes} min"
            )
    return lines
