"""
Modal screens: text prompt for edits and the exit confirmation
"""

from typing import Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from tui.views import EditTarget

PROMPTS = {
    EditTarget.START: ("Start time", "HH:MM"),
    EditTarget.END: ("End time", "HH:MM"),
    EditTarget.MEETING_NAME: ("Meeting name", "Meeting"),
}


class EditPromptModal(ModalScreen[Optional[str]]):
    """Single-line prompt; dismisses with the entered text or None on cancel"""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, target: EditTarget, initial: str = "") -> None:
        super().__init__()
        self.target = target
        self.initial = initial

    def compose(self) -> ComposeResult:
        title, placeholder = PROMPTS[self.target]
        with Vertical(id="edit-modal"):
            yield Static(f"[bold]{title}[/bold]", classes="modal-title")
            yield Input(value=self.initial, placeholder=placeholder, id="edit-input")
            yield Static("[dim][Enter] Confirm  [Esc] Cancel[/dim]")

    def on_mount(self) -> None:
        self.query_one("#edit-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmExitModal(ModalScreen[str]):
    """
    Asked on quit: save the day and exit, exit without saving, or go back

    Dismisses with "save", "discard" or "cancel".
    """

    BINDINGS = [
        Binding("y", "choose('save')", "Save and quit"),
        Binding("n", "choose('discard')", "Quit without saving"),
        Binding("escape", "choose('cancel')", "Back"),
    ]

    def __init__(self, closable: bool) -> None:
        super().__init__()
        self.closable = closable

    def compose(self) -> ComposeResult:
        with Vertical(id="exit-modal"):
            yield Static("[bold]Save today before quitting?[/bold]", classes="modal-title")
            if not self.closable:
                yield Static("[yellow]Start and end time must be set to save[/yellow]")
            yield Static("[dim][y] Save and quit  [n] Quit without saving  [Esc] Back[/dim]")

    def action_choose(self, choice: str) -> None:
        self.dismiss(choice)
