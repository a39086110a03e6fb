"""Display Utilities - Rich output formatting."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.modules.assessment.interface import AssessmentResults, Insight, ValueSource

console = Console()


def _source_label(source: ValueSource) -> str:
    if source is ValueSource.AI:
        return "[green]ai[/green]"
    return "[yellow]fallback[/yellow]"


def display_insights(insights: list[Insight]) -> None:
    """Display batch insights in a table."""
    table = Table(title="Batch Insights", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=3)
    table.add_column("Questions", width=9)
    table.add_column("Challenge", min_width=20)
    table.add_column("Insight", min_width=40)
    table.add_column("Conf.", width=5, justify="right")
    table.add_column("Source", width=8)

    for insight in insights:
        table.add_row(
            str(insight.batch_number),
            insight.question_range,
            insight.challenge_identified,
            insight.insight[:120] + "..." if len(insight.insight) > 120 else insight.insight,
            f"{insight.confidence}%",
            _source_label(insight.source),
        )

    console.print(table)


def display_results(results: AssessmentResults) -> None:
    """Display final results: score panel, skills and challenges."""
    score_color = "green" if results.overall_score >= 70 else (
        "yellow" if results.overall_score >= 40 else "red"
    )
    console.print(Panel.fit(
        f"[bold {score_color}]{results.overall_score}/100[/bold {score_color}] "
        f"- {results.performance_level.level}\n"
        f"[dim]{results.performance_level.description}[/dim]\n\n"
        f"Focus area: {results.focus_area.replace('_', ' ')}\n"
        f"Revenue opportunity: ${results.revenue_opportunity:,}\n"
        f"ROI multiplier: {results.roi_multiplier:.1f}x\n"
        f"Lead priority: {results.lead_priority.value} | "
        f"Timeline: {results.impact_timeline.value.replace('_', ' ')}\n"
        f"Confidence: {results.confidence}% | Source: {_source_label(results.source)}",
        title="Assessment Results",
        border_style=score_color,
    ))

    skills = Table(title="Skill Levels", show_header=True, header_style="bold cyan")
    skills.add_column("Skill", min_width=24)
    skills.add_column("Level", width=6, justify="right")
    for name, value in results.skill_levels.as_dict().items():
        skills.add_row(name.replace("_", " ").title(), f"{value:.1f}")
    skills.add_row("[bold]Weighted[/bold]", f"[bold]{results.weighted_skill_score}[/bold]")
    console.print(skills)

    if results.challenges:
        challenges = Table(title="Challenges", show_header=True, header_style="bold red")
        challenges.add_column("Priority", width=9)
        challenges.add_column("Challenge", min_width=20)
        challenges.add_column("Impact", width=6, justify="right")
        for challenge in results.challenges:
            challenges.add_row(
                challenge.priority.value,
                challenge.name,
                str(challenge.impact),
            )
        console.print(challenges)

    if results.next_steps:
        console.print("\n[bold]Next steps:[/bold]")
        for step in results.next_steps:
            console.print(f"  - {step}")
