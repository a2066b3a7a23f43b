"""CLI interface using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from exposure_risk import __version__
from exposure_risk.advisor import AdvisorContext, generate_decision
from exposure_risk.config import ExposureRiskConfig, Language, OutputFormat, RouteStrategy
from exposure_risk.exporters import export_geojson, export_json
from exposure_risk.graph import compare_routes
from exposure_risk.inputs import InvalidInputError, load_route_request
from exposure_risk.models import (
    ActivityLevel,
    AirQualityReading,
    DiseaseProfile,
    ExposureInput,
    HealthCondition,
    MaskType,
    NoRoutesError,
    SensitivityLevel,
    SmokingStatus,
    TravelerProfile,
    TravelInput,
    TravelMode,
    UserHealthProfile,
)
from exposure_risk.optimizer import optimize_for_safety
from exposure_risk.scoring import compare_route_risks, compute_risk

app = typer.Typer(
    name="exposure-risk",
    help="Personal PM2.5 exposure health-risk scoring and safest-route selection.",
    add_completion=False,
)
console = Console()

LEVEL_STYLES = {
    "low": "green",
    "moderate": "yellow",
    "high": "dark_orange",
    "severe": "red",
    "safe": "green",
    "caution": "yellow",
    "warning": "dark_orange",
    "danger": "red",
    "none": "green",
}


def _styled(level: str) -> str:
    style = LEVEL_STYLES.get(level.lower(), "white")
    return f"[{style}]{level}[/{style}]"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"exposure-risk {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Exposure Risk: personal PM2.5 health-risk scoring and safest-route selection."""


@app.command()
def score(
    pm25: Annotated[float, typer.Option("--pm25", "-p", help="PM2.5 concentration in µg/m³.")],
    minutes: Annotated[
        float, typer.Option("--minutes", "-t", help="Exposure duration in minutes.")
    ] = 60.0,
    activity: Annotated[
        ActivityLevel, typer.Option("--activity", "-a", help="Activity level.")
    ] = ActivityLevel.LIGHT,
    indoor: Annotated[bool, typer.Option("--indoor", help="Exposure happens indoors.")] = False,
    mask: Annotated[
        MaskType | None, typer.Option("--mask", help="Mask worn, if any.")
    ] = None,
    age: Annotated[int, typer.Option("--age", help="Age in years.")] = 30,
    disease: Annotated[
        list[DiseaseProfile] | None,
        typer.Option("--disease", "-D", help="Pre-existing condition (repeatable)."),
    ] = None,
    smoking: Annotated[
        SmokingStatus, typer.Option("--smoking", help="Smoking status.")
    ] = SmokingStatus.NEVER,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
) -> None:
    """Compute the Personal Health Risk Index for one exposure."""
    _configure_logging(verbose)

    result = compute_risk(
        ExposureInput(
            pm25=pm25,
            duration_minutes=minutes,
            activity_level=activity,
            is_outdoor=not indoor,
            has_mask=mask is not None and mask != MaskType.NONE,
            mask_type=mask,
        ),
        UserHealthProfile(age=age, diseases=disease or [], smoking_status=smoking),
    )

    table = Table(title="PHRI Breakdown")
    table.add_column("Factor", style="bold")
    table.add_column("Value", justify="right")
    for name, value in vars(result.breakdown).items():
        table.add_row(name.replace("_", " "), str(value))
    console.print(table)

    console.print(
        f"\nPHRI [bold]{result.score}[/bold] ({result.normalized_score}/10) "
        f"{_styled(str(result.level))} - {result.level_label_en}"
    )
    if result.dominant_factors:
        console.print(f"Dominant factors: {', '.join(result.dominant_factors)}")
    console.print(f"Confidence: {result.confidence}")


def _print_ranking(comparisons) -> None:
    table = Table(title="Route Health Risk Ranking")
    table.add_column("Route", justify="right", style="bold")
    table.add_column("Avg PHRI", justify="right", style="red")
    table.add_column("Peak PHRI", justify="right")
    table.add_column("Avg PM2.5", justify="right")
    table.add_column("Minutes", justify="right")
    table.add_column("km", justify="right")
    for c in comparisons:
        table.add_row(
            str(c.route_index + 1) + (" *" if c.is_safest else ""),
            str(c.average_phri),
            str(c.peak_phri),
            str(c.average_pm25),
            str(c.duration_minutes),
            f"{c.distance_km:.1f}",
        )
    console.print(table)
    console.print(f"\n{comparisons[0].recommendation}")


def _print_optimized(result) -> None:
    table = Table(title="Route Safety Optimization")
    table.add_column("Rank", justify="right", style="bold")
    table.add_column("Route", justify="right")
    table.add_column("Overall", justify="right", style="red")
    table.add_column("Health", justify="right")
    table.add_column("Convenience", justify="right")
    table.add_column("Avg PM2.5", justify="right")
    table.add_column("Peak PM2.5", justify="right")
    for scored in result.all_routes:
        s = scored.scores
        table.add_row(
            str(scored.rank),
            str(scored.route.index + 1),
            str(s.overall_score),
            str(s.health_score),
            str(s.convenience_score),
            str(s.average_pm25),
            str(s.peak_pm25),
        )
    console.print(table)

    decision = result.decision
    console.print(f"\nWarning level: {_styled(decision.warning_level)}")
    console.print(decision.decision_text_en)
    console.print(
        f"Trade-off: {decision.tradeoff.health_benefit}% lower PM2.5 than the worst route, "
        f"+{decision.tradeoff.time_cost} min, +{decision.tradeoff.distance_cost} km"
    )
    console.print(f"Data quality: {result.metadata.data_quality}")


def _print_graph(result) -> None:
    table = Table(title="Health-Weighted Route Comparison")
    table.add_column("Route", justify="right", style="bold")
    table.add_column("Avg weight", justify="right", style="red")
    table.add_column("Max weight", justify="right")
    table.add_column("Exposure", justify="right")
    table.add_column("High-risk legs", justify="right")
    table.add_column("Risk")
    for i, route in enumerate(result.routes):
        marker = " *" if i == result.safest_route_index else ""
        table.add_row(
            f"{i + 1}{marker}",
            str(route.average_health_weight),
            str(route.max_health_weight),
            str(route.total_exposure_cost),
            str(route.high_risk_segments),
            _styled(str(route.overall_risk_level)),
        )
    console.print(table)
    console.print(f"\n{result.recommendation}")


@app.command()
def routes(
    request_file: Annotated[
        Path, typer.Argument(help="JSON file with a profile and candidate routes.")
    ],
    strategy: Annotated[
        RouteStrategy,
        typer.Option(
            "--strategy",
            "-s",
            help="Route scoring: 'rank' (PHRI), 'optimize' (composite) or 'graph'.",
        ),
    ] = "rank",
    speed: Annotated[
        float, typer.Option("--speed", help="Travel speed in km/h.")
    ] = 30.0,
    activity: Annotated[
        ActivityLevel, typer.Option("--activity", "-a", help="Activity level while travelling.")
    ] = ActivityLevel.LIGHT,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write results to this file.")
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format: json or geojson.")
    ] = "json",
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
) -> None:
    """Compare candidate routes by cumulative health risk."""
    _configure_logging(verbose)

    config = ExposureRiskConfig(
        travel_speed_kmh=speed,
        activity_level=activity,
        route_strategy=strategy,
        output_file=output,
        output_format=output_format,
    )

    try:
        candidates, profile = load_route_request(request_file)
        if config.route_strategy == "optimize":
            result = optimize_for_safety(
                candidates, profile, config.activity_level, config.travel_speed_kmh,
            )
        elif config.route_strategy == "graph":
            result = compare_routes(candidates, profile, config.activity_level)
        else:
            if not candidates:
                raise NoRoutesError("No routes to compare")
            result = compare_route_risks(
                candidates, profile, config.travel_speed_kmh, config.activity_level,
            )
    except (InvalidInputError, NoRoutesError, OSError) as exc:
        console.print(f"[red]Route comparison failed:[/red] {exc}")
        raise typer.Exit(code=1) from None

    if config.route_strategy == "optimize":
        _print_optimized(result)
    elif config.route_strategy == "graph":
        _print_graph(result)
    else:
        _print_ranking(result)

    if config.output_file is not None:
        if config.output_format == "geojson":
            export_geojson(result, config.output_file, routes=candidates)
        else:
            export_json(result, config.output_file)
        console.print(
            f"\n{config.output_format.upper()} written to [bold]{config.output_file}[/bold]"
        )


@app.command()
def advise(
    pm25: Annotated[float, typer.Option("--pm25", "-p", help="PM2.5 concentration in µg/m³.")],
    aqi: Annotated[float | None, typer.Option("--aqi", help="US EPA AQI value.")] = None,
    mode: Annotated[
        TravelMode, typer.Option("--mode", "-m", help="Travel mode.")
    ] = TravelMode.WALKING,
    minutes: Annotated[
        float, typer.Option("--minutes", "-t", help="Trip duration in minutes.")
    ] = 30.0,
    age: Annotated[int, typer.Option("--age", help="Age in years.")] = 30,
    condition: Annotated[
        list[HealthCondition] | None,
        typer.Option("--condition", "-C", help="Health condition (repeatable)."),
    ] = None,
    sensitivity: Annotated[
        SensitivityLevel, typer.Option("--sensitivity", help="Self-reported sensitivity.")
    ] = SensitivityLevel.LOW,
    mask: Annotated[
        MaskType | None, typer.Option("--mask", help="Mask worn, if any.")
    ] = None,
    destination: Annotated[
        str | None, typer.Option("--destination", "-d", help="Where you are going.")
    ] = None,
    language: Annotated[
        Language, typer.Option("--language", "-l", help="Decision language: en or th.")
    ] = "en",
    max_chars: Annotated[
        int, typer.Option("--max-chars", help="Character budget for the decision.")
    ] = 150,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
) -> None:
    """Give a short travel decision with ranked options."""
    _configure_logging(verbose)

    config = ExposureRiskConfig(language=language, max_decision_chars=max_chars)
    context = AdvisorContext(
        air_quality=AirQualityReading(pm25=pm25, aqi=aqi),
        profile=TravelerProfile(
            age=age,
            conditions=condition or [],
            sensitivity=sensitivity,
            has_mask=mask is not None and mask != MaskType.NONE,
            mask_type=mask,
        ),
        travel=TravelInput(mode=mode, duration_minutes=minutes),
        destination=destination,
    )
    response = generate_decision(
        context, language=config.language, max_chars=config.max_decision_chars,
    )

    risk = response.risk_score
    console.print(
        f"Risk [bold]{risk.total}[/bold] {_styled(str(risk.category))} - {risk.category_label_en}"
    )
    console.print(f"\n[bold]{response.decision}[/bold]\n")

    table = Table(title="Options")
    table.add_column("Option", style="bold")
    table.add_column("Action")
    table.add_column("Risk change", justify="right")
    for option in response.options:
        delta = "-" if option.risk_delta is None else f"{option.risk_delta:+d}"
        table.add_row(option.label, option.action, delta)
    console.print(table)
