"""Validate CLI commands for GapMiner.

Runs the LLM response validators over saved responses so prompts and
model changes can be checked offline.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from .settings import GapMinerSettings
from .validation import ValidationResult, ValidationTask, detect_toxicity, validate_response


@click.group()
def validate() -> None:
    """Validate saved LLM responses."""


@validate.command("gaps")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--paper",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Source paper text for the hallucination check",
)
@click.option("--max-gaps", type=int, default=None, help="Gap count flagged as over-extraction")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def validate_gaps(
    settings: GapMinerSettings,
    response_file: Path,
    paper: Path | None,
    max_gaps: int | None,
    as_json: bool,
) -> None:
    """Validate a gap-extraction response."""
    paper_content = paper.read_text(encoding="utf-8") if paper else None
    _run(
        settings,
        ValidationTask.GAP_EXTRACTION,
        response_file,
        as_json,
        paper_content=paper_content,
        max_gaps=max_gaps,
    )


@validate.command("proposal")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def validate_proposal(settings: GapMinerSettings, response_file: Path, as_json: bool) -> None:
    """Validate a research-proposal response."""
    _run(settings, ValidationTask.RESEARCH_PROPOSAL, response_file, as_json)


@validate.command("redteam")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def validate_redteam(settings: GapMinerSettings, response_file: Path, as_json: bool) -> None:
    """Validate a red-team analysis response."""
    _run(settings, ValidationTask.RED_TEAM, response_file, as_json)


@validate.command("toxicity")
@click.argument("text_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def validate_toxicity(text_file: Path, as_json: bool) -> None:
    """Scan text for sensitive-topic patterns."""
    result = detect_toxicity(text_file.read_text(encoding="utf-8"))
    if as_json:
        click.echo(
            json.dumps(
                {
                    "detected": result.detected,
                    "severity": result.severity,
                    "categories": list(result.categories),
                },
                indent=2,
            )
        )
        return

    if not result.detected:
        click.echo("No sensitive topics detected.")
        return
    click.echo(f"Sensitive topics detected (severity: {result.severity})")
    for category in result.categories:
        click.echo(f"  - {category}")


def _run(
    settings: GapMinerSettings,
    task: ValidationTask,
    response_file: Path,
    as_json: bool,
    *,
    paper_content: str | None = None,
    max_gaps: int | None = None,
) -> None:
    """Validate one response file, print the report, exit 1 when invalid."""
    result = validate_response(
        task,
        response_file.read_text(encoding="utf-8"),
        paper_content=paper_content,
        max_gaps=max_gaps,
        config=settings.validator,
    )
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_report(task, result)

    if not result.is_valid:
        sys.exit(1)


def _print_report(task: ValidationTask, result: ValidationResult) -> None:
    """Print a human-readable validation report."""
    verdict = "VALID" if result.is_valid else "INVALID"
    click.echo(f"{task.value}: {verdict} (score {result.score:.2f})")
    click.echo(
        f"  {result.metadata.response_length} chars, ~{result.metadata.token_count} tokens"
    )

    if not result.issues:
        click.echo("No issues found.")
        return

    click.echo(f"\nIssues ({len(result.issues)}):")
    for issue in result.issues:
        click.echo(f"  [{issue.severity.value.upper()}] {issue.type.value}: {issue.message}")
        if issue.suggestion:
            click.echo(f"    Suggestion: {issue.suggestion}")
