"""Main CLI interface for agents-dashboard."""

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .analyzers.usage import UsageLoader
from .models import Agent, CostMode, Period, UsageResponse
from .utils.options import LoadOptions
from .utils.periods import WEEKDAYS


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
    )


def render_response(console: Console, response: UsageResponse) -> None:
    """Print a usage response as rich tables."""
    console.print(f"\n[cyan]{response.source}[/cyan] [bold]{response.period}[/bold] report")

    if response.empty_state.is_empty:
        console.print("[yellow]No local usage data found.[/yellow]")
        for path in response.empty_state.missing_paths:
            console.print(f"  [dim]missing:[/dim] {path}")
        for step in response.empty_state.checklist:
            console.print(f"  - {step}")

    for error in response.errors:
        console.print(f"[red]Error:[/red] {error}")

    if response.summary:
        summary = response.summary
        console.print(
            f"Total tokens: [bold]{summary.total_tokens:,}[/bold]  "
            f"(input {summary.total_input_tokens:,}, output {summary.total_output_tokens:,})  "
            f"Cost: [green]${summary.total_cost_usd:.2f}[/green]"
        )

    if response.series:
        table = Table(title="Usage")
        table.add_column("Period")
        table.add_column("Tokens", justify="right")
        table.add_column("Cost (USD)", justify="right")
        for point in response.series:
            table.add_row(point.label, f"{point.total_tokens:,}", f"${point.cost_usd:.2f}")
        console.print(table)

    if response.sessions:
        table = Table(title="Sessions")
        table.add_column("Session")
        table.add_column("Last activity")
        table.add_column("Tokens", justify="right")
        table.add_column("Cost (USD)", justify="right")
        table.add_column("Models")
        for session in response.sessions:
            table.add_row(
                session.session_id,
                session.last_activity,
                f"{session.total_tokens:,}",
                f"${session.total_cost_usd:.2f}",
                ", ".join(session.models_used),
            )
        console.print(table)

    if response.blocks:
        table = Table(title="Blocks")
        table.add_column("Start")
        table.add_column("End")
        table.add_column("Active")
        table.add_column("Tokens", justify="right")
        table.add_column("Cost (USD)", justify="right")
        for block in response.blocks:
            table.add_row(
                block.start_time,
                block.end_time,
                "yes" if block.is_active else "",
                f"{block.total_tokens:,}",
                f"${block.cost_usd:.2f}",
            )
        console.print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose):
    """
    Agents usage dashboard

    Show token usage and costs recorded locally by Claude Code and
    OpenCode, either in a web browser or in the terminal.

    Examples:

      # Start the web dashboard
      $ agents-dashboard web

      # Print this month's Claude Code usage
      $ agents-dashboard report claude monthly
    """
    configure_logging(verbose)


@main.command()
@click.option("--port", type=int, default=5000, help="Port to run web server on (default: 5000)")
@click.option("--host", type=str, default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option("--debug", is_flag=True, help="Run in debug mode with auto-reload")
def web(port, host, debug):
    """
    Run the dashboard web server.

    Examples:

      # Start server on default port 5000
      $ agents-dashboard web

      # Start on custom port with debug mode
      $ agents-dashboard web --port 8080 --debug
    """
    console = Console()

    try:
        from .web.app import create_app

        app = create_app()

        console.print("\n[cyan]Agents Dashboard Web Server[/cyan]")
        console.print(f"[green]Web server running at:[/green] [bold]http://{host}:{port}[/bold]")
        if debug:
            console.print("[yellow]Debug mode:[/yellow] [bold]Enabled[/bold]")
        console.print("\n[dim]Press Ctrl+C to stop the server[/dim]\n")

        app.run(host=host, port=port, debug=debug)

    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}", style="red")
        sys.exit(1)


@main.command()
@click.argument("source", type=click.Choice([agent.value for agent in Agent], case_sensitive=False))
@click.argument("period", type=click.Choice([period.value for period in Period], case_sensitive=False))
@click.option(
    "--mode",
    type=click.Choice([mode.value for mode in CostMode], case_sensitive=False),
    help="Cost calculation mode",
)
@click.option("--timezone", type=str, help="Timezone for date grouping (e.g. UTC)")
@click.option(
    "--start-of-week",
    type=click.Choice(list(WEEKDAYS), case_sensitive=False),
    help="Day the week starts on (weekly reports)",
)
@click.option("--breakdown", is_flag=True, help="Request per-model breakdown")
@click.option("--json", "as_json", is_flag=True, help="Print the canonical response as JSON")
def report(source, period, mode, timezone, start_of_week, breakdown, as_json):
    """
    Print one usage report in the terminal.

    Exits with status 1 when the report carries errors.

    Examples:

      $ agents-dashboard report claude daily

      $ agents-dashboard report opencode weekly --json
    """
    console = Console()
    options = LoadOptions(
        mode=CostMode(mode.lower()) if mode else None,
        timezone=timezone,
        start_of_week=start_of_week.lower() if start_of_week else None,
        breakdown=breakdown,
    )

    response = UsageLoader().load(Agent.parse(source), Period.parse(period), options)

    if as_json:
        click.echo(json.dumps(response.to_dict(), indent=2))
    else:
        render_response(console, response)

    if response.errors:
        sys.exit(1)


if __name__ == "__main__":
    main()
