"""
Text bar charts for day summaries

Rendering is plain text so it can be tested without a terminal. Negative
totals (legacy records whose end precedes the start) are drawn as empty
bars; the numeric label still shows the raw value.
"""

from typing import List, Sequence

from models.entities import DaySummary

BAR_CHAR = "█"
DATE_WIDTH = 10
BLANK_LABEL = "-" * DATE_WIDTH
TODAY_MARK = "*"

# (key letter, DaySummary attribute)
SERIES = (
    ("W", "worked_minutes"),
    ("M", "meeting_minutes"),
    ("F", "focus_minutes"),
)

LEGEND = "W worked   M meetings   F focus   * today"


def format_minutes(minutes: int) -> str:
    """e.g. 445 -> '7h 25m', -30 -> '-0h 30m'"""
    sign = "-" if minutes < 0 else ""
    hours, rest = divmod(abs(minutes), 60)
    return f"{sign}{hours}h {rest:02d}m"


def _bar(value: int, scale_max: int, bar_width: int) -> str:
    value = max(0, value)
    if scale_max <= 0 or value == 0:
        return ""
    return BAR_CHAR * max(1, round(value * bar_width / scale_max))


def render_bars(summaries: Sequence[DaySummary], width: int = 60) -> List[str]:
    """
    Render one block of three bars per summary

    Args:
        summaries: Chart slots, oldest first; blank summaries are padding
        width: Total line width available

    Returns:
        Lines of text, three per summary
    """
    # date, mark, key and the 8-wide value label plus separators take 23 columns
    bar_width = max(1, width - DATE_WIDTH - 13)
    scale_max = max(
        (max(0, getattr(s, attr)) for s in summaries for _, attr in SERIES),
        default=0,
    )

    lines: List[str] = []
    for summary in summaries:
        label = BLANK_LABEL if summary.is_blank else summary.date
        mark = TODAY_MARK if summary.is_today else " "
        for i, (key, attr) in enumerate(SERIES):
            value = getattr(summary, attr)
            prefix = f"{label}{mark}" if i == 0 else " " * (DATE_WIDTH + 1)
            bar = _bar(value, scale_max, bar_width)
            lines.append(f"{prefix} {key} {bar:<{bar_width}} {format_minutes(value):>8}")
    return lines
