"""Authentication commands."""

import typer

from todry.services.session_service import get_session
from todry.utils.typer_helpers import SuggestingGroup
from todry.utils.ui.formatters import format_info, format_output, format_success

from .decorators import command_wrapper
from .utils import output_format

app = typer.Typer(cls=SuggestingGroup, help="Authentication commands")


@app.command("signup")
@command_wrapper(auth_required=False)
def signup(
    username: str = typer.Argument(..., help="Username (no spaces)"),
    password: str = typer.Option(
        ...,
        "--password",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Password",
    ),
) -> None:
    """Create an account and log in."""
    user = get_session().signup(username, password)
    format_success(f"Welcome, {user.username}! You are logged in.")


@app.command("login")
@command_wrapper(auth_required=False)
def login(
    username: str = typer.Argument(..., help="Username (case-insensitive)"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, help="Password"
    ),
) -> None:
    """Log in. Any other user's session on this machine ends."""
    user = get_session().login(username, password)
    format_success(f"Logged in as {user.username}")


@app.command("logout")
@command_wrapper(auth_required=False)
def logout() -> None:
    """Log out of the current session."""
    session = get_session()
    if session.user is None:
        format_info("Not logged in")
        return
    username = session.user.username
    session.logout()
    format_success(f"Logged out {username}")


@app.command("whoami")
@command_wrapper
def whoami(
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Show the logged-in user."""
    session = get_session()
    user = session.user
    data = {
        "id": user.id,
        "username": user.username,
        "created_at": user.created_at.isoformat(),
        "theme": session.theme(),
    }
    format_output(data, output_format(session, output))
