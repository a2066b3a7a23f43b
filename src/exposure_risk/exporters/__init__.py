"""Exporters for route risk results."""

from exposure_risk.exporters.geojson_export import export_geojson
from exposure_risk.exporters.json_export import export_json

__all__ = ["export_geojson", "export_json"]
