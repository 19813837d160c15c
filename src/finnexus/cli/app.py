"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..conversation import Message, Role
from ..errors import FinNexusError
from ..session import SessionManager
from .callbacks import ConsoleCallback
from .providers import get_config, get_history, require_credential, setup_logging

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="finnexus",
    help="Streaming chat client for remote AI agents",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

_ROLE_STYLES = {
    Role.USER: "bold yellow",
    Role.ASSISTANT: "bold magenta",
    Role.SYSTEM: "bold red",
}

_EXIT_COMMANDS = ("/quit", "/exit", "/q")


def _print_message(message: Message) -> None:
    style = _ROLE_STYLES[message.role]
    console.print(f"[{style}]{message.role.value.capitalize()}:[/] {escape(message.content)}")


@app.callback()
def main_options(
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (debug, info, warning, error); default from FINNEXUS_LOG_LEVEL"
    ),
):
    """Configure logging for every command."""
    setup_logging(log_level, console)


@app.command()
def sessions(
    token: str = typer.Option(None, "--token", "-t", help="Bearer credential (default: FINNEXUS_TOKEN)"),
):
    """List your conversation sessions."""
    async def _sessions():
        credential = require_credential(token, console)
        config = get_config()
        async with get_history(config) as client:
            manager = SessionManager(client, config=config)
            result = await manager.fetch_sessions(credential)

        if not result:
            console.print("[dim]No sessions yet.[/dim]")
            return

        table = Table(title="Sessions")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title")
        table.add_column("Updated", style="dim")
        for session in result:
            updated = session.updated_at.strftime("%Y-%m-%d %H:%M") if session.updated_at else ""
            table.add_row(session.id, session.title, updated)
        console.print(table)

    asyncio.run(_sessions())


@app.command()
def history(
    session_id: str = typer.Argument(..., help="Session to show"),
    token: str = typer.Option(None, "--token", "-t", help="Bearer credential (default: FINNEXUS_TOKEN)"),
):
    """Print the messages of a session."""
    async def _history():
        credential = require_credential(token, console)
        config = get_config()
        async with get_history(config) as client:
            try:
                messages = await client.get_messages(credential, session_id)
            except FinNexusError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)

        if not messages:
            console.print("[dim]No messages in this session.[/dim]")
        for message in messages:
            _print_message(message)

    asyncio.run(_history())


@app.command()
def chat(
    session_id: str = typer.Option(
        None,
        "--session",
        "-s",
        help="Resume an existing session instead of starting a new one"
    ),
    token: str = typer.Option(None, "--token", "-t", help="Bearer credential (default: FINNEXUS_TOKEN)"),
):
    """Chat with the agent interactively.

    Commands: /new starts a new session, /stop stops the current
    response, /reconnect reopens a dropped connection, /quit leaves.
    """
    async def _chat():
        credential = require_credential(token, console)
        config = get_config()
        callback = ConsoleCallback(console)

        async with get_history(config) as client:
            async with SessionManager(client, config=config, callback=callback) as manager:
                if session_id:
                    await manager.load_session(credential, session_id)
                    for message in manager.messages:
                        _print_message(message)
                    console.print(f"[dim]Resumed session {session_id}[/dim]")

                console.print("[bold cyan]FinNexus Chat[/bold cyan]")
                console.print("[dim]Type /new, /stop, /reconnect or /quit\n[/dim]")

                while True:
                    try:
                        user_input = await asyncio.to_thread(console.input, "[bold yellow]You:[/bold yellow] ")
                    except (KeyboardInterrupt, EOFError):
                        console.print("\n[dim]Goodbye![/dim]")
                        break

                    text = user_input.strip()
                    if not text:
                        continue

                    if text.lower() in _EXIT_COMMANDS:
                        console.print("[dim]Goodbye![/dim]")
                        break

                    if text == "/new":
                        new_id = manager.start_new_session(credential)
                        console.print(f"[dim]Started session {new_id}[/dim]")
                        continue

                    if text == "/stop":
                        await manager.cancel()
                        continue

                    if text == "/reconnect":
                        try:
                            manager.reconnect(credential)
                        except FinNexusError as e:
                            console.print(f"[red]Error: {e}[/red]")
                        continue

                    callback.begin_turn()
                    try:
                        manager.send_or_start(credential, user_input)
                    except FinNexusError as e:
                        console.print(f"[red]Error: {e}[/red]")
                        callback.turn_finished.set()
                        continue

                    try:
                        await callback.turn_finished.wait()
                    except asyncio.CancelledError:
                        await manager.cancel()
                        raise

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted.[/dim]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
