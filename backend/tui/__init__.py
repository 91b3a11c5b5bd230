"""
Terminal UI - Textual dashboard over a TrackerContext

Import ``tui.app.WorktimeApp`` to run it; the chart and view helpers
import without Textual.
"""
