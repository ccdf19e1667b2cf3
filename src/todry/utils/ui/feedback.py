"""Console rendering of feedback cues."""

from todry.services.feedback_service import FeedbackCue
from todry.utils.ui.console import get_console

CUE_MARKUP = {
    FeedbackCue.TASK_CREATED: "[cyan]✚[/cyan]",
    FeedbackCue.TASK_COMPLETED: "[bold green]🎉 Nice work![/bold green]",
    FeedbackCue.TASK_DELETED: "[dim]🗑[/dim]",
}


def console_feedback_sink(cue: FeedbackCue) -> None:
    """Print a short glyph for a cue. Clicks are silent on a terminal."""
    markup = CUE_MARKUP.get(cue)
    if markup:
        get_console().print(markup)
