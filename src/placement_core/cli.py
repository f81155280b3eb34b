"""Command-line interface for inspecting workflows and scoring candidates."""

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from placement_core.config import get_settings
from placement_core.core.models import CandidateProfile, EligibilityCriteria, JobPosting
from placement_core.jobs.matcher import MatchScorer
from placement_core.utils.logging import configure_logging
from placement_core.workflow.application import APPLICATION_WORKFLOW
from placement_core.workflow.approval import ORGANIZATION_APPROVAL, RECRUITER_APPROVAL

app = typer.Typer(
    name="placement-core",
    help="Placement Workflow Core - application and approval workflows, eligibility and match scoring",
    add_completion=False,
)
console = Console()

WORKFLOWS = {
    "application": APPLICATION_WORKFLOW,
    "organization": ORGANIZATION_APPROVAL,
    "recruiter": RECRUITER_APPROVAL,
}


@app.callback()
def _setup() -> None:
    configure_logging()


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()
    table = Table(title="Placement Workflow Core Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("JSON Logs", str(settings.log_json))

    console.print(table)


@app.command()
def workflow(name: str = typer.Argument(..., help="application, organization or recruiter")) -> None:
    """Print a workflow's transition table."""
    definition = WORKFLOWS.get(name.lower())
    if definition is None:
        console.print(f"[red]Unknown workflow {name!r}. Choose one of: {', '.join(WORKFLOWS)}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"{definition.name} (initial: {definition.initial_state})")
    table.add_column("From", style="cyan")
    table.add_column("Action", style="magenta")
    table.add_column("To", style="green")
    table.add_column("Roles")
    table.add_column("Guard")

    for item in definition.edges:
        table.add_row(
            item.from_state,
            item.action,
            item.to_state,
            ", ".join(sorted(role.value for role in item.allowed_roles)),
            item.guard.__name__ if item.guard else "-",
        )

    console.print(table)
    console.print(f"Terminal states: {', '.join(sorted(definition.terminal_states))}")


@app.command()
def score(
    skills: List[str] = typer.Option([], "--skill", help="Candidate skill (repeatable)"),
    cgpa: float = typer.Option(..., min=0, max=10, help="Candidate CGPA"),
    branch: str = typer.Option(..., help="Candidate branch"),
    graduation_year: int = typer.Option(..., help="Candidate graduation year"),
    experience_years: int = typer.Option(0, min=0, help="Candidate experience in years"),
    required_skills: List[str] = typer.Option([], "--require", help="Required skill (repeatable)"),
    min_cgpa: Optional[float] = typer.Option(None, min=0, max=10, help="Minimum CGPA criterion"),
    allowed_branches: List[str] = typer.Option([], "--allow-branch", help="Allowed branch (repeatable)"),
    required_year: Optional[int] = typer.Option(None, help="Required graduation year"),
    experience_required: int = typer.Option(0, min=0, help="Experience the job requires"),
) -> None:
    """Score an ad-hoc candidate against ad-hoc job criteria."""
    job = JobPosting(
        id="adhoc",
        title="Ad-hoc job",
        organization_id="adhoc",
        criteria=EligibilityCriteria(
            min_cgpa=min_cgpa,
            allowed_branches=tuple(allowed_branches) or None,
            graduation_year=required_year,
        ),
        skills_required=tuple(required_skills),
        experience_required=experience_required,
    )
    profile = CandidateProfile(
        user_id="adhoc",
        cgpa=cgpa,
        branch=branch,
        graduation_year=graduation_year,
        skills=tuple(skills),
        experience_years=experience_years,
    )
    result = MatchScorer().score(job, profile)

    table = Table(title="Match Breakdown")
    table.add_column("Component", style="cyan")
    table.add_column("Points", style="green")
    breakdown = result.breakdown
    for component, points in (
        ("Skills", breakdown.skills),
        ("CGPA", breakdown.cgpa),
        ("Branch", breakdown.branch),
        ("Experience", breakdown.experience),
    ):
        table.add_row(component, "excluded" if points is None else f"{points:g}")

    console.print(table)
    console.print(f"Eligible: {'yes' if result.eligible else 'no'}")
    console.print(f"Score: {result.score} ({result.fit_level})")


@app.command()
def version() -> None:
    """Show version information."""
    from placement_core import __version__
    console.print(f"Placement Workflow Core v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
