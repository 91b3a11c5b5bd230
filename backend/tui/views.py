"""
View identities and per-view state for the dashboard tabs

The app keeps one ViewState per ViewId and looks renderers up in a dict
keyed by ViewId, so adding a tab means adding one enum member and one
renderer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List


class ViewId(str, Enum):
    DASHBOARD = "dashboard"
    HISTORY_CHART = "history-chart"
    EDIT_HISTORY = "edit-history"
    FOCUS = "focus"

    @property
    def title(self) -> str:
        return VIEW_TITLES[self]


VIEW_TITLES: Dict[ViewId, str] = {
    ViewId.DASHBOARD: "Dashboard",
    ViewId.HISTORY_CHART: "History",
    ViewId.EDIT_HISTORY: "Edit history",
    ViewId.FOCUS: "Focus time",
}

VIEW_ORDER: List[ViewId] = list(ViewId)


class EditTarget(str, Enum):
    """Which field the input prompt is currently editing"""

    NOT_EDITING = "not_editing"
    START = "start"
    END = "end"
    MEETING_NAME = "meeting_name"


@dataclass
class ViewState:
    """Cached state of one tab"""

    selected_index: int = 0

    def move(self, delta: int, item_count: int) -> int:
        """Move the selection, clamped to [0, item_count - 1]"""
        if item_count <= 0:
            self.selected_index = 0
        else:
            self.selected_index = max(0, min(item_count - 1, self.selected_index + delta))
        return self.selected_index


def next_view(current: ViewId) -> ViewId:
    index = VIEW_ORDER.index(current)
    return VIEW_ORDER[(index + 1) % len(VIEW_ORDER)]


def view_for_number(number: int) -> ViewId:
    """1-based tab number to ViewId; raises IndexError when out of range"""
    if number < 1:
        raise IndexError(number)
    return VIEW_ORDER[number - 1]
