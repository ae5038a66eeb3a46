"""
CLI interface for Claude Metrics.

Provides command-line access to every dashboard query.
"""

import json
import logging
import sys
from typing import Any, Callable, Dict, Optional

import typer
from rich.console import Console
from rich.table import Table

from claude_metrics.config.loader import load_config
from claude_metrics.core.queries import MetricsQueries, run_query

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

DEFAULT_TOOL_LIMIT = 10


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a YAML configuration file"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging"
    ),
):
    """Claude Metrics CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    ctx.obj = {"config": config}
    if ctx.invoked_subcommand is None:
        console.print("Claude Metrics - Use --help to see available commands")


def _queries(ctx: typer.Context) -> MetricsQueries:
    config_path = (ctx.obj or {}).get("config")
    try:
        config = load_config(config_path)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    return MetricsQueries(config)


def _run(
    query: Callable[[], Any],
    as_json: bool,
    render: Callable[[Any], None],
) -> None:
    """Run a query, print it, and exit with the matching code."""
    response = run_query(query)
    if not response["ok"]:
        console.print(f"[red]Error:[/] {response['error']}")
        sys.exit(EXIT_CODE_FAIL)

    if as_json:
        print(json.dumps(response["data"], indent=2))
    else:
        render(response["data"])
    sys.exit(EXIT_CODE_PASS)


def _json_option() -> Any:
    return typer.Option(False, "--json", help="Print raw JSON")


def _format_currency(amount: float) -> str:
    """Format currency with proper symbols and formatting."""
    return f"${abs(amount):,.2f}"


def _format_tokens(count: int) -> str:
    return f"{count:,}"


@app.command()
def stats(ctx: typer.Context, as_json: bool = _json_option()):
    """Show overview totals, cost and ROI."""
    _run(_queries(ctx).stats, as_json, _display_stats)


def _display_stats(data: Dict[str, Any]) -> None:
    console.print("\n[bold]Claude Usage Overview[/bold]")
    console.print("-" * 40)
    console.print(f"Sessions: {data['totalSessions']:,}")
    console.print(f"Prompts: {data['totalPrompts']:,}")
    if data['totalMessages'] is not None:
        console.print(f"Messages: {data['totalMessages']:,}")
    console.print(f"Active days: {data['activeDays']}")
    console.print(f"First session: {data['firstSession'] or '-'}")
    console.print(f"Last session: {data['lastSession'] or '-'}")

    tokens = Table(title="Tokens")
    tokens.add_column("Input", justify="right")
    tokens.add_column("Output", justify="right")
    tokens.add_column("Cache read", justify="right")
    tokens.add_column("Cache write", justify="right")
    tokens.add_row(
        _format_tokens(data['totalInput']),
        _format_tokens(data['totalOutput']),
        _format_tokens(data['totalCacheRead']),
        _format_tokens(data['totalCacheWrite']),
    )
    console.print(tokens)

    console.print(f"\nAPI-equivalent cost: {_format_currency(data['totalCost'])}")
    console.print(f"Subscription: {_format_currency(data['proSubscription'])}")
    console.print(f"Savings: {_format_currency(data['savings'])}")
    console.print(f"ROI: {data['roi']}%\n")


@app.command()
def daily(ctx: typer.Context, as_json: bool = _json_option()):
    """Show prompts and sessions per day."""
    _run(_queries(ctx).daily, as_json, _display_daily)


def _display_daily(days) -> None:
    if not days:
        console.print("\n[dim]No activity found.[/]")
        return
    table = Table(title="Daily Activity")
    table.add_column("Date")
    table.add_column("Prompts", justify="right")
    table.add_column("Sessions", justify="right")
    for day in days:
        table.add_row(day['date'], str(day['prompts']), str(day['sessionCount']))
    console.print(table)


@app.command()
def heatmap(ctx: typer.Context, as_json: bool = _json_option()):
    """Show prompts by weekday and hour."""
    _run(_queries(ctx).heatmap, as_json, _display_heatmap)


def _display_heatmap(data: Dict[str, Any]) -> None:
    shades = " .:-=+*#%@"
    max_count = data['maxCount']
    console.print("\n[bold]Activity Heatmap[/bold] (max {})".format(max_count))
    console.print("     " + "".join(f"{hour:<3d}" for hour in range(24)))
    for row in data['heatmap']:
        cells = ""
        for cell in row['hours']:
            level = round(cell['count'] / max_count * (len(shades) - 1))
            cells += shades[level] * 2 + " "
        console.print(f"{row['day']}  {cells}")
    print()


@app.command()
def insights(ctx: typer.Context, as_json: bool = _json_option()):
    """Show streaks, productivity and fun stats."""
    _run(_queries(ctx).insights, as_json, _display_insights)


def _display_insights(data: Dict[str, Any]) -> None:
    streaks = data['streaks']
    prod = data['productivity']
    prompts = data['prompts']
    fun = data['funStats']

    console.print("\n[bold]Insights[/bold]")
    console.print("-" * 40)
    console.print(f"Current streak: {streaks['current']} day(s)")
    console.print(f"Longest streak: {streaks['longest']} day(s)")
    if streaks['bestDay']:
        best = streaks['bestDay']
        console.print(f"Best day: {best['date']} ({best['prompts']} prompts)")

    console.print(f"\nAvg prompts/day: {prod['avgPromptsPerDay']}")
    console.print(f"Avg prompts/session: {prod['avgPromptsPerSession']}")
    console.print(f"Active days: {prod['activeDays']} of {prod['totalDaysSpan']}")

    console.print(f"\nPrompts: {prompts['total']:,}")
    console.print(f"Avg prompt length: {prompts['avgLength']} chars")
    console.print(f"Longest prompt: {prompts['maxLength']} chars")

    console.print(f"\nWords written: {fun['wordsWritten']:,}")
    console.print(f"Pages: {fun['pagesWritten']:,}  Books: {fun['booksEquivalent']}")
    console.print(f"Typing time saved: {fun['hoursSaved']} hours\n")


@app.command()
def cache(ctx: typer.Context, as_json: bool = _json_option()):
    """Show prompt-cache efficiency."""
    _run(_queries(ctx).cache, as_json, _display_cache)


def _display_cache(data: Dict[str, Any]) -> None:
    console.print("\n[bold]Cache Efficiency[/bold]")
    console.print("-" * 40)
    console.print(f"Cache reads: {_format_tokens(data['cacheRead'])}")
    console.print(f"Cache writes: {_format_tokens(data['cacheWrite'])}")
    console.print(f"Hit rate: {data['hitRate']}%")
    console.print(f"Savings: {_format_currency(data['savings'])}")
    console.print(f"Cached/fresh ratio: {data['efficiency']['ratio']}x\n")


@app.command()
def projects(ctx: typer.Context, as_json: bool = _json_option()):
    """Show prompts per project."""
    _run(_queries(ctx).projects, as_json, _display_projects)


def _display_projects(rows) -> None:
    if not rows:
        console.print("\n[dim]No projects found.[/]")
        return
    table = Table(title="Projects")
    table.add_column("Project")
    table.add_column("Prompts", justify="right")
    for row in rows:
        table.add_row(row['name'], str(row['prompts']))
    console.print(table)


@app.command()
def tools(
    ctx: typer.Context,
    limit: int = typer.Option(
        DEFAULT_TOOL_LIMIT,
        "--limit",
        "-n",
        help="Number of tools to show"
    ),
    as_json: bool = _json_option(),
):
    """Show tool usage and work style."""
    queries = _queries(ctx)
    _run(lambda: queries.tools(limit=limit), as_json, _display_tools)


def _display_tools(data: Dict[str, Any]) -> None:
    if data['tools']:
        table = Table(title="Tool Usage")
        table.add_column("Tool")
        table.add_column("Calls", justify="right")
        for tool in data['tools']:
            table.add_row(tool['name'], f"{tool['count']:,}")
        console.print(table)
    else:
        console.print("\n[dim]No tool usage found.[/]")
    ratio = data['readWriteRatio']
    console.print(f"Read: {ratio['read']:,}  Write: {ratio['write']:,}")
    console.print(f"Work style: [bold]{data['exploringVsBuilding']}[/bold]\n")


@app.command()
def models(ctx: typer.Context, as_json: bool = _json_option()):
    """Show per-model token usage and cost."""
    _run(_queries(ctx).models, as_json, _display_models)


def _display_models(rows) -> None:
    if not rows:
        console.print("\n[dim]No model usage found.[/]")
        return
    table = Table(title="Models")
    table.add_column("Model")
    table.add_column("Output", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Cost", justify="right")
    for row in rows:
        table.add_row(
            f"{row['name']} ({row['fullName']})",
            _format_tokens(row['outputTokens']),
            f"{row['percentage']}%",
            _format_currency(row['cost']),
        )
    console.print(table)


if __name__ == "__main__":
    app()
