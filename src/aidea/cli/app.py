"""Main CLI application using Typer."""
import asyncio
import logging
from enum import Enum
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from ..chat import ChatController, StagedAttachments
from ..memory import ConversationState, create_conversation_memory
from ..render import RenderTree, classify, render, to_html
from ..ui.formatting import steps_text, to_group
from .providers import DEFAULT_MEMORY_PATH, get_llm, get_memory, memory_settings

# Load environment variables
load_dotenv()

app = typer.Typer(
    name="aidea",
    help="AI<>DEA: reasoning-aware chat in the terminal",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    RICH = "rich"
    HTML = "html"
    JSON = "json"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.callback()
def main_options(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        help="Console log level for non-TUI commands: debug, info, warning or error"
    ),
):
    """AI<>DEA command line."""
    # The TUI routes logs into its own panel
    if ctx.invoked_subcommand != "chat":
        _configure_logging(log_level)


@app.command()
def chat(
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model to start with (default: $AIDEA_MODEL or temper-1)"
    ),
    memory_backend: str | None = typer.Option(
        None,
        "--memory-backend",
        help="Conversation memory: 'memory' (session-only) or 'sqlite' (persistent)"
    ),
    memory_path: str | None = typer.Option(
        None,
        "--memory-path",
        help="Path for the SQLite memory database (only with sqlite)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive chat TUI."""
    from ..ui import run_textual_tui

    llm = get_llm(console, model)
    backend, path = memory_settings(memory_backend, memory_path)

    try:
        asyncio.run(run_textual_tui(
            llm=llm,
            memory_backend=backend,
            memory_path=path,
            log_level=log_level,
        ))
    except KeyboardInterrupt:
        pass
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    console.print("\n[dim]Goodbye![/dim]")


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model to use"),
    image: Path | None = typer.Option(None, "--image", help="Image to attach"),
    pdf: Path | None = typer.Option(None, "--pdf", help="PDF to attach"),
    show_reasoning: bool = typer.Option(
        False,
        "--show-reasoning",
        "-r",
        help="Print the model's reasoning steps"
    ),
    memory_backend: str | None = typer.Option(None, "--memory-backend", help="'memory' or 'sqlite'"),
    memory_path: str | None = typer.Option(None, "--memory-path", help="SQLite database path"),
):
    """Send a single message and print the rendered reply."""
    staged = StagedAttachments()
    try:
        if image:
            staged.stage_image(image)
        if pdf:
            staged.stage_document(pdf)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    async def _ask():
        llm = get_llm(console, model)
        memory = get_memory(memory_backend, memory_path)
        try:
            await memory.connect()
            controller = ChatController(llm=llm, memory=memory)
            with console.status("[dim]Thinking...[/dim]"):
                reply = await controller.send(prompt, staged.snapshot())
        finally:
            await memory.disconnect()
            await llm.close()
        return reply

    try:
        reply = asyncio.run(_ask())
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if reply is None:
        console.print("[yellow]Nothing to send[/yellow]")
        raise typer.Exit(code=1)

    if show_reasoning and reply.disclosure is not None:
        console.print(Panel(steps_text(reply.disclosure.steps), title="Reasoning", border_style="magenta"))
    console.print(to_group(reply.nodes))

    if reply.failed:
        console.print(f"[red]Error: {reply.error}[/red]")
        raise typer.Exit(code=1)


@app.command(name="render")
def render_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Assistant text to render"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.RICH,
        "--format",
        "-f",
        help="Output format"
    ),
):
    """Render assistant-style markdown from a file."""
    nodes = render(_read_text(file))

    if output_format == OutputFormat.HTML:
        console.print(to_html(nodes), markup=False, highlight=False, soft_wrap=True)
    elif output_format == OutputFormat.JSON:
        console.print_json(RenderTree(nodes=nodes).model_dump_json())
    else:
        console.print(to_group(nodes))


@app.command(name="classify")
def classify_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Code snippet file"),
):
    """Print the language detected for a code snippet."""
    console.print(classify(_read_text(file)), markup=False, highlight=False)


@app.command()
def models(
    model: str | None = typer.Option(None, "--model", "-m", help="Model used for the client"),
):
    """List the models offered by the completion service."""
    async def _models():
        llm = get_llm(console, model)
        try:
            return await llm.available_models()
        finally:
            await llm.close()

    names = asyncio.run(_models())
    if not names:
        console.print("[yellow]No models available (see logs with --log-level info)[/yellow]")
        return
    for name in sorted(names):
        console.print(name, markup=False, highlight=False)


@app.command()
def export(
    memory_path: str = typer.Option(DEFAULT_MEMORY_PATH, "--memory-path", help="SQLite database path"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
):
    """Export the stored conversation and notes as JSON."""
    async def _export():
        memory = create_conversation_memory("sqlite", path=memory_path)
        try:
            await memory.connect()
            state = await memory.get_state()
        finally:
            await memory.disconnect()
        return state.export()

    data = asyncio.run(_export())
    if output is None:
        console.print(data, markup=False, highlight=False, soft_wrap=True)
        return
    output.write_text(data, encoding="utf-8")
    console.print(f"[green]Exported to {output}[/green]")


@app.command(name="import")
def import_state(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON produced by 'aidea export'"),
    memory_path: str = typer.Option(DEFAULT_MEMORY_PATH, "--memory-path", help="SQLite database path"),
):
    """Replace a stored conversation with an exported one."""
    try:
        state = ConversationState.import_data(_read_text(file))
    except ValidationError as e:
        console.print(f"[red]Error: Invalid export file: {e.error_count()} problem(s)[/red]")
        raise typer.Exit(code=1)

    async def _import():
        memory = create_conversation_memory("sqlite", path=memory_path)
        try:
            await memory.connect()
            # Imported conversations become the default session
            await memory.save_state(
                state.model_copy(update={"session_id": memory.default_session_id})
            )
        finally:
            await memory.disconnect()

    asyncio.run(_import())
    console.print(
        f"[green]Imported {len(state.messages)} message(s) and {len(state.notes)} note(s)[/green]"
    )


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
