"""CLI command implementations for the Goal Analysis Engine."""

from __future__ import annotations

import asyncio
import json
from typing import IO, TYPE_CHECKING, Any

import click

from src.domains.goal_analysis.services.goal_analysis_service import GoalAnalysisService
from src.domains.goal_analysis.services.keyword_matcher import KeywordMatcher
from src.models.config import AnalysisConfig
from src.utils.logger import configure_logging, get_logger

if TYPE_CHECKING:
    from src.models.analysis_result import AnalysisResult
    from src.models.analysis_state import AnalysisUpdate
    from src.models.quality_assessment import QualityAssessment

logger = get_logger(__name__)


def _get_config(**overrides: Any) -> AnalysisConfig:
    """Load configuration from environment / .env, applying CLI overrides."""
    return AnalysisConfig(**{k: v for k, v in overrides.items() if v is not None})


def _print_summary(title: str, stats: dict[str, Any]) -> None:
    """Print a formatted summary block."""
    click.echo(f"\n[SUCCESS] {title}")
    for key, value in stats.items():
        if isinstance(value, list | tuple):
            click.echo(f"  {key} ({len(value)}):")
            for item in value[:10]:
                click.echo(f"    - {item}")
            if len(value) > 10:
                click.echo(f"    ... and {len(value) - 10} more")
        else:
            click.echo(f"  {key}: {value}")


def _format_update(update: AnalysisUpdate) -> str:
    state = update.state
    line = f"[{state.status.upper()}] {update.text!r}"
    if state.status == "completed":
        line += f" confidence={state.confidence:.2f} quality={update.quality_score:.2f}"
    if state.message:
        line += f" error={state.message}"
    if update.suggestions:
        line += f" suggestions={','.join(update.suggestions)}"
    if update.visibility_changes:
        changes = ", ".join(f"{k}:{v}" for k, v in update.visibility_changes.items())
        line += f" changes=[{changes}]"
    return line


# --- Analysis ---


async def _run_forced_analysis(
    config: AnalysisConfig,
    text: str,
    selected: tuple[str, ...],
) -> tuple[AnalysisResult | None, list[str], QualityAssessment]:
    service = GoalAnalysisService(KeywordMatcher(config=config))
    service.update_selections(selected)
    result = await service.force_analyze(text)
    return result, service.current_suggestions(), service.quality_assessment(selected)


@click.command()
@click.argument("text")
@click.option("--selected", multiple=True, help="Category already selected (repeatable)")
@click.option("--no-fuzzy", is_flag=True, help="Disable fuzzy matching")
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "detailed", "json"]),
    help="Output format",
)
def analyze(text: str, selected: tuple[str, ...], no_fuzzy: bool, output_format: str) -> None:
    """Analyze a goal description and print suggested categories."""
    config = _get_config(enable_fuzzy_matching=False if no_fuzzy else None)
    configure_logging(config.log_level)

    result, suggestions, assessment = asyncio.run(_run_forced_analysis(config, text, selected))

    if output_format == "json":
        payload = {
            "result": result.model_dump(mode="json") if result else None,
            "suggestions": suggestions,
            "assessment": {
                **assessment.model_dump(mode="json"),
                "score_category": assessment.score_category,
            },
        }
        click.echo(json.dumps(payload, indent=2))
        return

    if result is None:
        click.echo(f"[INFO] Text shorter than {config.min_text_length} characters, nothing to analyze")
        return

    _print_summary(
        "Analysis complete",
        {
            "confidence": f"{result.confidence:.2f}",
            "matches": len(result.matches),
            "suggestions": suggestions,
            "quality": f"{assessment.overall_score:.2f} ({assessment.score_category})",
            "ready": assessment.is_ready,
        },
    )

    if output_format == "detailed":
        click.echo("\n  Matches:")
        for match in result.matches:
            click.echo(
                f"    {match.category:<14} {match.strategy:<14} {match.confidence:.3f}  "
                f"{match.keyword!r} in {match.context!r}"
            )
        if assessment.feedback:
            click.echo("\n  Feedback:")
            for item in assessment.feedback:
                click.echo(f"    - {item}")


@click.command()
def categories() -> None:
    """List the categories and their trigger phrases."""
    config = _get_config()
    configure_logging(config.log_level)
    matcher = KeywordMatcher(config=config)

    for category in matcher.categories:
        click.echo(f"{category.name} [{category.kind}, {category.tier}] {category.title}")
        if category.trigger_phrases:
            click.echo(f"    {', '.join(category.trigger_phrases)}")


async def _run_simulation(
    config: AnalysisConfig,
    lines: list[str],
    delay: float,
) -> list[AnalysisUpdate]:
    service = GoalAnalysisService(KeywordMatcher(config=config))
    for line in lines:
        service.analyze(line)
        await asyncio.sleep(delay)
    await service.wait_for_pending()

    updates: list[AnalysisUpdate] = []
    while not service.updates.empty():
        updates.append(service.updates.get_nowait())
    return updates


@click.command()
@click.argument("input_file", type=click.File("r"), default="-")
@click.option("--delay", default=0.1, type=float, help="Seconds between keystroke snapshots")
@click.option("--debounce", default=None, type=float, help="Override the debounce interval")
def simulate(input_file: IO[str], delay: float, debounce: float | None) -> None:
    """Feed each input line as a text snapshot through the debounced pipeline."""
    config = _get_config(debounce_interval=debounce)
    configure_logging(config.log_level)

    lines = [line.rstrip("\n") for line in input_file]
    click.echo(f"[INFO] Simulating {len(lines)} text changes (debounce {config.debounce_interval}s)...")
    updates = asyncio.run(_run_simulation(config, lines, delay))

    for update in updates:
        click.echo(_format_update(update))
    logger.debug("simulation_finished", inputs=len(lines), updates=len(updates))
