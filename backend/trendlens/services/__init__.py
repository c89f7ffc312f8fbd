"""Record-store backed services for chart queries."""

from trendlens.services.chart_service import ChartService
from trendlens.services.daily_totals_service import DailyTotalsService

__all__ = ["ChartService", "DailyTotalsService"]
