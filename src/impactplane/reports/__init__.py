"""Report records and registry."""

from impactplane.reports.models import Report, ReportFormat, ReportRegistry

__all__ = ["Report", "ReportFormat", "ReportRegistry"]
