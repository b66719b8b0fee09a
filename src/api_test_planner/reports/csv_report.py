"""Semicolon-separated test analysis report (Excel-friendly, UTF-8 BOM)."""

import csv
import io
from datetime import datetime, timezone

from api_test_planner.generator.suggestions import type_description, type_label
from api_test_planner.models import AnalysisResult

from .formatting import format_number_comma_decimal

SEPARATOR = ";"
HEADERS = ("Operation ID", "Verb", "Path", "Test Type", "Test Description", "Est. Hours")


def render_csv(result: AnalysisResult, generated_at: datetime | None = None) -> str:
    generated_at = generated_at or datetime.now(timezone.utc)
    summary = result.summary

    buf = io.StringIO()
    buf.write("\ufeffTest Analysis Report\n")
    buf.write(f"Generated: {generated_at.isoformat()}\n\n")
    writer = csv.writer(buf, delimiter=SEPARATOR, lineterminator="\n")

    buf.write("Summary\n")
    writer.writerow(["Total Paths Analyzed", summary.total_paths])
    writer.writerow(["Total Operations Found", summary.total_operations])
    writer.writerow(["Total Test Suggestions", summary.total_suggestions])
    writer.writerow(["Total Estimated Hours", format_number_comma_decimal(summary.total_estimated_hours)])
    buf.write("Operations by Verb:\n")
    for verb, count in summary.verb_counts.items():
        if count > 0:
            writer.writerow([verb.upper(), count])
    buf.write("\n")

    buf.write("Test Type Legend\n")
    writer.writerow(["Type", "Description"])
    for suggestion_type, text in result.legend.items():
        writer.writerow([suggestion_type, text])
    buf.write("\n")

    writer.writerow(HEADERS)
    for s in result.suggestions:
        writer.writerow([
            s.operation_id,
            s.verb,
            s.path,
            type_label(s.type),
            type_description(s.type, s.verb),
            format_number_comma_decimal(s.estimated_hours),
        ])
    return buf.getvalue()
