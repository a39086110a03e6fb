"""CLI Entry Point - Main command interface.

This module provides the main entry point for the assessment-insights CLI:
configuration checks and a full simulated assessment run.
"""

import asyncio
import logging

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from src.cli.simulation import SAMPLE_USER, build_simulated_responses
from src.cli.ui.display import display_insights, display_results
from src.modules.insights.interface import InsightBatch
from src.shared.config import get_settings
from src.shared.exceptions import error_kind_of
from src.shared.feature_flags import FeatureFlags, get_feature_flags
from src.shared.service_registry import ServiceRegistry

# Main application
app = typer.Typer(
    name="assessment-insights",
    help="Assessment Insights - AI-assisted sales assessment pipeline",
    no_args_is_help=True,
    pretty_exceptions_enable=True,
)
console = Console()


def run_async(coro):
    """Helper to run async functions in sync context."""
    return asyncio.run(coro)


async def _probe_ai() -> tuple[bool, str]:
    registry = ServiceRegistry.create(get_settings())
    try:
        responses = build_simulated_responses(scale=6)[:4]
        outcome = await registry.insight_client.generate_insight(InsightBatch(
            session_id="check-ai",
            batch_number=1,
            question_range="1-4",
            responses=responses,
            user_info=SAMPLE_USER,
        ))
    finally:
        await registry.dispose()

    if outcome.is_success:
        return True, outcome.value.insight
    if outcome.error is None:
        return False, "AI not configured or disabled, fallback used"
    kind = error_kind_of(outcome.error)
    label = kind.value if kind else type(outcome.error).__name__
    return False, f"{label}: {outcome.error}"


@app.command("check-ai")
def check_ai(
    probe: bool = typer.Option(True, "--probe/--no-probe", help="Send one live request"),
) -> None:
    """Report AI configuration and optionally probe the API once."""
    settings = get_settings()
    flags = get_feature_flags()

    console.print(Panel.fit("[bold]AI Configuration[/bold]", border_style="cyan"))
    console.print(f"  Model: {settings.default_model}")
    console.print(f"  Timeout: {settings.ai_timeout_seconds}s")
    if settings.anthropic_api_key:
        console.print(f"  Anthropic key: [green]***{settings.anthropic_api_key[-4:]}[/green]")
    else:
        console.print("  Anthropic key: [red]Not set[/red]")
    ai_flag = flags.is_enabled(FeatureFlags.ENABLE_AI_INSIGHTS)
    console.print(f"  AI insights flag: {'[green]on[/green]' if ai_flag else '[yellow]off[/yellow]'}")

    if not probe:
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Probing AI insight generation...", total=None)
        ok, message = run_async(_probe_ai())

    if ok:
        console.print(f"\n[green]AI responded:[/green] {message}")
    else:
        console.print(f"\n[yellow]Fallback:[/yellow] {message}")
        raise typer.Exit(1)


async def _simulate(scale: int):
    registry = ServiceRegistry.create(get_settings())
    store = registry.session_store
    try:
        session_id = await store.start_assessment(SAMPLE_USER)
        for response in build_simulated_responses(scale):
            insight = await store.add_response(session_id, response)
            if insight is not None:
                console.print(
                    f"[dim]Batch {insight.batch_number} ({insight.question_range}) "
                    f"insight: {insight.source.value}[/dim]"
                )
        results = await store.complete_assessment(session_id)
        return store.get_session_insights(session_id), results
    finally:
        await registry.dispose()


@app.command("simulate")
def simulate(
    scale: int = typer.Option(6, "--scale", "-s", min=1, max=10, help="Answer for every scale question"),
    offline: bool = typer.Option(False, "--offline", help="Skip the AI and use fallback analysis"),
) -> None:
    """Run a full twelve-response assessment through the pipeline."""
    if offline:
        get_feature_flags().disable(FeatureFlags.ENABLE_AI_INSIGHTS)

    console.print(Panel.fit(
        f"[bold]Simulated assessment[/bold]\n"
        f"{SAMPLE_USER.company} - {SAMPLE_USER.product_name}\n"
        f"Scale answers: {scale}/10",
        border_style="cyan",
    ))

    try:
        insights, results = run_async(_simulate(scale))
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    display_insights(insights)
    display_results(results)


@app.command("config")
def config() -> None:
    """View and validate configuration."""
    console.print(Panel.fit("[bold]Configuration[/bold]", border_style="cyan"))

    try:
        settings = get_settings()
    except ValueError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        console.print("\n[yellow]Make sure .env file exists with valid settings.[/yellow]")
        raise typer.Exit(1)

    console.print("\n[bold]Environment:[/bold]")
    console.print(f"  Mode: {settings.environment}")
    console.print(f"  Log level: {settings.log_level}")

    console.print("\n[bold]Assessment:[/bold]")
    console.print(f"  Questions: {settings.total_questions}")
    console.print(f"  Insight batches end at: {settings.insight_batch_boundaries}")

    console.print("\n[bold]Resilience:[/bold]")
    console.print(
        f"  Rate limit: {settings.ai_rate_limit_requests} requests / "
        f"{settings.ai_rate_limit_window_ms // 60000} min"
    )
    console.print(
        f"  Retries: {settings.retry_max_retries} "
        f"(base {settings.retry_base_delay_ms} ms, x{settings.retry_backoff_multiplier})"
    )
    console.print(
        f"  Circuit: opens after {settings.circuit_failure_threshold} failures, "
        f"probes after {settings.circuit_recovery_timeout_seconds:.0f}s"
    )

    console.print("\n[bold]Persistence:[/bold]")
    console.print(f"  Supabase: {'configured' if settings.is_supabase_configured else 'not configured'}")
    console.print(f"  Timeout: {settings.persistence_timeout_seconds}s")

    console.print("\n[bold]Feature flags:[/bold]")
    for name, enabled in get_feature_flags().get_all_states().items():
        console.print(f"  {name}: {'[green]on[/green]' if enabled else '[dim]off[/dim]'}")


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (defaults to API_HOST)"),
    port: int = typer.Option(None, "--port", help="Port (defaults to API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("version")
def version() -> None:
    """Show version information."""
    console.print(Panel.fit(
        "[bold]Assessment Insights CLI[/bold]\n"
        "Version: 0.1.0",
        border_style="cyan",
    ))


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Assessment Insights - AI-assisted sales assessment pipeline.

    Quick start:
      assessment-insights config     - Check configuration
      assessment-insights check-ai   - Probe the AI connection
      assessment-insights simulate   - Run a full sample assessment
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
