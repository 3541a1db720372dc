"""
Visualizer for the Capacity Forecaster

Renders capacity summaries and workload forecasts as text and CSV.
"""

import csv
import io
from datetime import date, timedelta
from typing import Literal, Optional

from .models import MemberCapacitySummary, ResourceAvailability


# ASCII art for terminal output
class ASCIICharts:
    """Generate ASCII art charts for terminal/text output."""

    @staticmethod
    def horizontal_bar(
        value: float,
        max_value: float = 100,
        width: int = 20,
        filled_char: str = "█",
        empty_char: str = "░"
    ) -> str:
        """Create a horizontal bar chart."""
        if max_value <= 0:
            return empty_char * width

        filled = int((value / max_value) * width)
        filled = max(0, min(filled, width))
        return filled_char * filled + empty_char * (width - filled)

    @staticmethod
    def utilization_bar(percentage: float, overloaded: bool, width: int = 20) -> str:
        """Create a utilization bar with an overload marker."""
        bar = ASCIICharts.horizontal_bar(percentage, 100, width)
        marker = "!" if overloaded else " "
        return f"{bar} {percentage:5.1f}% {marker}"


class TextReporter:
    """Generate text-based reports."""

    @staticmethod
    def team_capacity_report(summaries: list[MemberCapacitySummary], today: date) -> str:
        """Generate a text report of team capacity."""
        lines = []
        overloaded = [s for s in summaries if s.is_overloaded]
        average = (
            sum(s.utilization_percentage for s in summaries) / len(summaries)
            if summaries else 0
        )

        # Header
        lines.append("╔" + "═" * 60 + "╗")
        lines.append("║" + "TEAM CAPACITY REPORT".center(60) + "║")
        lines.append("║" + f"As of: {today.isoformat()}".center(60) + "║")
        lines.append("╠" + "═" * 60 + "╣")

        # Summary stats
        lines.append("║ SUMMARY".ljust(61) + "║")
        lines.append("║" + "─" * 60 + "║")
        lines.append(f"║  Team Size: {len(summaries)}".ljust(61) + "║")
        lines.append(f"║  Average Utilization: {average:.1f}%".ljust(61) + "║")
        lines.append(f"║  Overloaded: {len(overloaded)}".ljust(61) + "║")
        lines.append("╠" + "═" * 60 + "╣")

        # Individual utilization
        lines.append("║ UTILIZATION (! = overloaded)".ljust(61) + "║")
        lines.append("║" + "─" * 60 + "║")

        for s in sorted(summaries, key=lambda s: s.utilization_percentage, reverse=True):
            name = s.member_name[:15].ljust(15)
            bar = ASCIICharts.utilization_bar(s.utilization_percentage, s.is_overloaded, 15)
            available = s.estimated_available_date.isoformat() if s.estimated_available_date else "n/a"
            lines.append(f"║  {name} {bar} {available}".ljust(61) + "║")

        # Footer
        lines.append("╚" + "═" * 60 + "╝")

        return "\n".join(lines)

    @staticmethod
    def forecast_report(availability: ResourceAvailability) -> str:
        """Day-by-day workload for one member."""
        lines = [
            f"Workload forecast: {availability.member_name} "
            f"(capacity {availability.daily_capacity:.1f}h/day)",
            "─" * 44,
        ]

        if not availability.workload_forecast:
            lines.append("No scheduled work")
            return "\n".join(lines)

        for day, hours in sorted(availability.workload_forecast.items()):
            bar = ASCIICharts.horizontal_bar(hours, availability.daily_capacity, 20)
            lines.append(f"{day.isoformat()} {bar} {hours:6.2f}h")

        return "\n".join(lines)


class CSVExporter:
    """Tabular export of capacity data."""

    CAPACITY_HEADER = [
        "Member",
        "Role",
        "Team",
        "Daily Capacity (h)",
        "Remaining (h)",
        "Active Tasks",
        "Available From",
        "Next Deadline",
        "Overloaded",
        "Utilization (%)",
    ]

    @classmethod
    def capacity_rows(cls, summaries: list[MemberCapacitySummary]) -> list[list]:
        rows = [list(cls.CAPACITY_HEADER)]
        for s in summaries:
            next_deadline = s.upcoming_deadlines[0] if s.upcoming_deadlines else None
            rows.append([
                s.member_name,
                s.role or "",
                s.team or "",
                round(s.daily_capacity_hours, 2),
                round(s.total_remaining_hours, 2),
                s.active_tasks,
                s.estimated_available_date.isoformat() if s.estimated_available_date else "",
                (
                    f"{next_deadline.issue_key} ({next_deadline.estimated_completion_date.isoformat()})"
                    if next_deadline else ""
                ),
                "yes" if s.is_overloaded else "no",
                round(s.utilization_percentage, 2),
            ])
        return rows

    @staticmethod
    def forecast_rows(
        forecasts: list[ResourceAvailability],
        start: date,
        days: int
    ) -> list[list]:
        """One row per member, one column per day of the horizon."""
        dates = [start + timedelta(days=i) for i in range(days)]
        rows = [["Member", "Daily Capacity (h)"] + [d.isoformat() for d in dates]]
        for f in forecasts:
            rows.append(
                [f.member_name, round(f.daily_capacity, 2)]
                + [round(f.workload_forecast.get(d, 0.0), 2) for d in dates]
            )
        return rows

    @staticmethod
    def to_csv(rows: list[list]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerows(rows)
        return buffer.getvalue()


class Visualizer:
    """
    Main visualizer class that supports multiple output formats.

    Usage:
        viz = Visualizer()

        # Text report
        print(viz.team_report(summaries, today, format="text"))

        # CSV export
        csv_text = viz.team_report(summaries, today, format="csv")
    """

    def __init__(self):
        self.text = TextReporter()
        self.csv = CSVExporter()
        self.ascii = ASCIICharts()

    def team_report(
        self,
        summaries: list[MemberCapacitySummary],
        today: date,
        format: Literal["text", "csv"] = "text"
    ) -> str:
        """Generate team capacity report in specified format."""
        if format == "text":
            return self.text.team_capacity_report(summaries, today)
        elif format == "csv":
            return self.csv.to_csv(self.csv.capacity_rows(summaries))
        else:
            raise ValueError(f"Unknown format: {format}")

    def forecast_report(
        self,
        forecasts: list[ResourceAvailability],
        today: date,
        days: int,
        format: Literal["text", "csv"] = "text"
    ) -> str:
        """Generate workload forecast report in specified format."""
        if format == "text":
            return "\n\n".join(self.text.forecast_report(f) for f in forecasts)
        elif format == "csv":
            return self.csv.to_csv(self.csv.forecast_rows(forecasts, today, days))
        else:
            raise ValueError(f"Unknown format: {format}")

    def overload_alert(self, summary: MemberCapacitySummary) -> Optional[str]:
        """One-line alert for an overloaded member, None otherwise."""
        if not summary.is_overloaded:
            return None
        return (
            f"⚠️ ALERT: {summary.member_name} is overloaded "
            f"({summary.total_remaining_hours:.0f}h remaining, "
            f"{summary.utilization_percentage:.0f}% utilized)"
        )
