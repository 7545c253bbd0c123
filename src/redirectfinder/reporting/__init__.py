"""Export of redirect proposals."""

from redirectfinder.reporting.exporter import (
    RedirectExporter,
    percent_bucket,
    percent_distribution,
)

__all__ = [
    "RedirectExporter",
    "percent_bucket",
    "percent_distribution",
]
