"""CLI entry point for stepagent."""

from __future__ import annotations

import asyncio
import json
import logging
import os

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stepagent.agent.step import (
    ActionStep,
    ObserveStep,
    OutputStep,
    PlanStep,
    ReasoningStep,
)
from stepagent.config import StepAgentConfig
from stepagent.pipeline import build_pipeline

app = typer.Typer(
    name="stepagent",
    help="A tool-using assistant that plans, acts and observes until it can answer.",
    no_args_is_help=True,
)

console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_config(config_file: str | None, model: str | None) -> StepAgentConfig:
    config = StepAgentConfig.load(config_file)
    if model:
        config.llm.model = model
    return config


def _print_step(round_no: int, step: ReasoningStep) -> None:
    """Render one step as it is appended to the conversation."""
    if isinstance(step, PlanStep):
        console.print(f"[dim]\\[{round_no}][/dim] [cyan]plan[/cyan] {escape(step.content)}")
    elif isinstance(step, ActionStep):
        arg = json.dumps(step.input, ensure_ascii=False)
        console.print(
            f"[dim]\\[{round_no}][/dim] [yellow]action[/yellow] {escape(step.function)}({escape(arg)})"
        )
    elif isinstance(step, ObserveStep):
        first_line = step.output.split("\n")[0][:100]
        console.print(f"[dim]\\[{round_no}][/dim] [magenta]observe[/magenta] {escape(first_line)}")
    elif isinstance(step, OutputStep):
        console.print(f"[dim]\\[{round_no}][/dim] [green]output[/green]")


def _show_api_key_status(config: StepAgentConfig) -> None:
    """Print which API key is active so the user can verify the right one is loaded."""
    provider_prefix = config.llm.model.split("/")[0] if "/" in config.llm.model else ""
    key_env_map = {
        "anthropic": "ANTHROPIC_API_KEY",
        "gemini": "GEMINI_API_KEY",
        "openai": "OPENAI_API_KEY",
    }
    env_var = key_env_map.get(provider_prefix, "")
    if env_var and not os.environ.get(env_var):
        typer.echo(f"WARNING: {env_var} is not set! Set it in .env or your shell.", err=True)


@app.command()
def ask(
    query: str = typer.Argument(help="The question or request for the agent."),
    model: str | None = typer.Option(
        None, "--model", "-m", help="LLM model to use (default: from env/config)."
    ),
    max_rounds: int | None = typer.Option(
        None, "--max-rounds", "-r", min=1, help="Round limit for this query."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only print the final answer."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Answer a single query and exit."""
    setup_logging(verbose)
    config = _load_config(config_file, model)
    if max_rounds is not None:
        config.agent.max_rounds = max_rounds
    _show_api_key_status(config)

    pipeline = build_pipeline(config)
    result = asyncio.run(pipeline.run(query, on_step=None if quiet else _print_step))

    if result.ok:
        console.print(result.answer, markup=False, highlight=False)
        return

    error = result.error
    assert error is not None
    typer.echo(json.dumps(error.to_payload(), ensure_ascii=False), err=True)
    raise typer.Exit(1)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: $PORT or 3000)."),
    model: str | None = typer.Option(None, "--model", "-m", help="LLM model to use."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Serve the agent over HTTP (POST /chat)."""
    import uvicorn

    from stepagent.server.app import create_app

    setup_logging(verbose)
    logging.getLogger("stepagent").setLevel(logging.DEBUG if verbose else logging.INFO)
    config = _load_config(config_file, model)
    _show_api_key_status(config)

    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
    )


@app.command()
def tools(
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """List the tools available to the agent."""
    pipeline = build_pipeline(_load_config(config_file, None))

    table = Table(title="Tools")
    table.add_column("Name", style="bold")
    table.add_column("Input")
    table.add_column("Description")
    for name in pipeline.tool_registry.names():
        tool = pipeline.tool_registry.lookup(name)
        assert tool is not None
        table.add_row(tool.name, tool.input_shape, tool.description)
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
