"""CLI entry point for api-test-planner."""

import json
import logging
import sys
from pathlib import Path

import click

from api_test_planner.config import AnalyzerConfig
from api_test_planner.generator.analyzer import analyze_openapi
from api_test_planner.generator.collection import build_collection
from api_test_planner.reports.csv_report import render_csv
from api_test_planner.reports.html_report import render_html

COLLECTION_FILE = "postman_collection.json"
CSV_FILE = "test_analysis_report.csv"
HTML_FILE = "test_analysis_report.html"


@click.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output-dir", default=".", type=click.Path(file_okay=False, path_type=Path), help="Directory for the generated files.")
@click.option("--collection/--no-collection", default=True, help="Write the Postman collection.")
@click.option("--csv/--no-csv", "write_csv", default=True, help="Write the CSV report.")
@click.option("--html/--no-html", "write_html", default=True, help="Write the HTML report.")
@click.option("--composition-policy", default="first", type=click.Choice(["first", "widest"]), help="oneOf/anyOf branch used for examples.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(spec_path: Path, output_dir: Path, collection: bool, write_csv: bool, write_html: bool, composition_policy: str, verbose: bool):
    """Analyze an OpenAPI document and generate a Postman collection plus test-effort reports."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    click.echo(f"Analyzing {spec_path}...")
    config = AnalyzerConfig(composition_policy=composition_policy)
    result = analyze_openapi(spec_path, config=config)
    if result is None:
        click.echo("Analysis failed. Exiting.", err=True)
        sys.exit(1)

    summary = result.summary
    click.echo(
        f"Found {summary.total_operations} operations in {summary.total_paths} paths, "
        f"{summary.total_suggestions} test suggestions ({summary.total_estimated_hours:.2f}h)."
    )

    output_dir.mkdir(parents=True, exist_ok=True)
    if collection:
        path = output_dir / COLLECTION_FILE
        data = build_collection(result, base_url_var=config.base_url_var)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        click.echo(f"  Postman collection saved to {path}")

    if write_csv:
        path = output_dir / CSV_FILE
        path.write_text(render_csv(result), encoding="utf-8")
        click.echo(f"  CSV analysis report saved to {path}")

    if write_html:
        path = output_dir / HTML_FILE
        path.write_text(render_html(result), encoding="utf-8")
        click.echo(f"  HTML analysis report saved to {path}")
