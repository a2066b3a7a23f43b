"""JSON exporter for route risk results."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from exposure_risk.graph import RouteComparisonResult
from exposure_risk.models import RouteRiskComparison
from exposure_risk.optimizer import OptimizedRouteResult


def export_json(
    results: OptimizedRouteResult | RouteComparisonResult | list[RouteRiskComparison],
    output_path: Path,
    indent: int = 2,
) -> Path:
    """Export route results to a JSON file.

    A PHRI ranking is written as an array of routes, safest first.  Optimizer
    and graph results are written as one object tagged with the strategy
    that produced it.
    """
    data: Any
    if isinstance(results, list):
        data = [asdict(r) for r in results]
    elif isinstance(results, OptimizedRouteResult):
        data = {"strategy": "optimize", **asdict(results)}
    else:
        data = {"strategy": "graph", **asdict(results)}

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)
    return output_path
