"""Self-contained HTML test analysis report."""

from datetime import datetime, timezone
from html import escape

from api_test_planner.generator.suggestions import type_description, type_label
from api_test_planner.models import AnalysisResult

from .formatting import format_number_comma_decimal

STYLE = """
        body { font-family: sans-serif; line-height: 1.6; padding: 20px; }
        h1, h2, h3 { color: #333; border-bottom: 1px solid #eee; padding-bottom: 5px; margin-top: 30px; }
        table { border-collapse: collapse; width: 100%; margin-bottom: 20px; }
        th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
        th { background-color: #f2f2f2; font-weight: bold; }
        tr:nth-child(even) { background-color: #f9f9f9; }
        .summary-table td:first-child { font-weight: bold; width: 200px; }
        .legend-table td:first-child { font-weight: bold; width: 250px; }
        .suggestions-table th:last-child, .suggestions-table td:last-child { text-align: right; }
        .container { max-width: 1200px; margin: auto; }
        code { background-color: #eee; padding: 2px 4px; border-radius: 3px; }
"""


def _summary_rows(result: AnalysisResult) -> str:
    s = result.summary
    rows = [
        ("Total Paths Analyzed:", s.total_paths),
        ("Total Operations Found:", s.total_operations),
        ("Total Test Suggestions:", s.total_suggestions),
        ("Total Estimated Hours:", format_number_comma_decimal(s.total_estimated_hours)),
    ]
    html = [f"<tr><td>{label}</td><td>{escape(str(value))}</td></tr>" for label, value in rows]
    html.append('<tr><td colspan="2"><strong>Operations by Verb:</strong></td></tr>')
    html.extend(
        f"<tr><td>{escape(verb.upper())}</td><td>{count}</td></tr>"
        for verb, count in s.verb_counts.items()
        if count > 0
    )
    return "\n            ".join(html)


def _legend_rows(result: AnalysisResult) -> str:
    return "\n                ".join(
        f"<tr><td>{escape(t)}</td><td>{escape(text)}</td></tr>" for t, text in result.legend.items()
    )


def _suggestion_rows(result: AnalysisResult) -> str:
    rows = []
    for s in result.suggestions:
        rows.append(
            "<tr>"
            f"<td>{escape(s.operation_id)}</td>"
            f"<td>{escape(s.verb)}</td>"
            f"<td><code>{escape(s.path)}</code></td>"
            f"<td>{escape(type_label(s.type))}</td>"
            f"<td><div>{escape(s.description)}<br>{escape(type_description(s.type, s.verb))}</div></td>"
            f"<td>{format_number_comma_decimal(s.estimated_hours)}</td>"
            "</tr>"
        )
    return "\n                ".join(rows)


def render_html(result: AnalysisResult, generated_at: datetime | None = None) -> str:
    generated_at = generated_at or datetime.now(timezone.utc)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Test Analysis Report</title>
    <style>{STYLE}    </style>
</head>
<body>
    <div class="container">
        <h1>Test Analysis Report</h1>
        <p>{escape(result.title)} - Generated: {generated_at.isoformat()}</p>

        <h2>Summary</h2>
        <table class="summary-table">
            {_summary_rows(result)}
        </table>

        <h2>Test Type Legend</h2>
        <table class="legend-table">
            <thead><tr><th>Type</th><th>Description</th></tr></thead>
            <tbody>
                {_legend_rows(result)}
            </tbody>
        </table>

        <h2>Test Suggestions</h2>
        <table class="suggestions-table">
            <thead>
                <tr>
                    <th>Operation ID / Summary</th>
                    <th>Verb</th>
                    <th>Path</th>
                    <th>Test Type</th>
                    <th>Test Description</th>
                    <th>Est. Hours</th>
                </tr>
            </thead>
            <tbody>
                {_suggestion_rows(result)}
            </tbody>
        </table>
    </div>
</body>
</html>
"""
