"""Operation analyzer: walks every path x verb of an OpenAPI document.

For each operation it resolves security, builds the request descriptor and
the list of suggested tests, then groups requests into folders by path.
"""

import logging
import re
import uuid
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from api_test_planner.config import AnalyzerConfig, variable_name
from api_test_planner.models import AnalysisResult, Folder, KeyValue, Summary
from api_test_planner.parser.swagger import SpecLoadError, base_url, load_spec, operation_parameters, server_url

from .examples import ExampleBuilder
from .request import RequestBuilder
from .security import effective_security, resolve_security
from .suggestions import OperationSuggestions, estimation_table, suggest_for_operation

logger = logging.getLogger(__name__)


def folder_name(path: str) -> str:
    """``/users/{id}/orders`` -> ``Users Orders``; empty paths become ``Root``."""
    name = path.strip("/")
    name = re.sub(r"\{[^}]+\}", "", name)
    name = re.sub(r"/+", " ", name).replace("_", " ").strip().lower()
    words = [w[:1].upper() + w[1:] for w in name.split(" ")]
    return " ".join(words) or "Root"


def is_excluded(path: str, keywords: tuple[str, ...]) -> bool:
    lowered = path.lower()
    return any(keyword in lowered for keyword in keywords)


class OperationAnalyzer:
    """Analyzes one loaded OpenAPI document.

    All run state (folders, suggestions, legend, totals) lives on the
    instance; ``analyze`` builds a fresh result each call.
    """

    def __init__(
        self,
        spec: dict,
        config: AnalyzerConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        uuid_factory: Callable[[], uuid.UUID] | None = None,
    ):
        self.spec = spec
        self.config = config or AnalyzerConfig()
        self.examples = ExampleBuilder(
            spec,
            composition_policy=self.config.composition_policy,
            clock=clock,
            uuid_factory=uuid_factory,
        )
        self.estimates = estimation_table(self.config.estimate_overrides)

    def analyze(self, source_name: str = "") -> AnalysisResult | None:
        paths = self.spec.get("paths")
        if not isinstance(paths, dict):
            logger.error("OpenAPI spec is invalid or 'paths' section not found.")
            return None

        cfg = self.config
        raw_server_url = server_url(self.spec)
        info = self.spec.get("info") or {}
        result = AnalysisResult(
            title=info.get("title") or "Generated API Tests",
            description=info.get("description") or "Auto-generated tests from OpenAPI spec",
            source_name=source_name,
            server_url=raw_server_url,
            base_url=base_url(raw_server_url, cfg.base_url_var),
            summary=Summary(verb_counts={verb: 0 for verb in cfg.http_verbs}),
        )
        requests = RequestBuilder(self.spec, self.examples, cfg)
        folders: dict[str, Folder] = {}
        seen_ids: dict[str, int] = {}

        logger.info("Analyzing paths...")
        for path, path_item in paths.items():
            if not isinstance(path_item, dict) or is_excluded(path, cfg.exclude_path_keywords):
                continue
            result.summary.total_paths += 1

            name = folder_name(path)
            folder = folders.get(name)
            if folder is None:
                folder = folders[name] = Folder(name=name, description=f"Requests for path: {path}")

            for method, operation in path_item.items():
                verb = str(method).lower()
                if verb not in cfg.http_verbs or not isinstance(operation, dict):
                    continue
                result.summary.verb_counts[verb] += 1
                result.summary.total_operations += 1

                operation_id = self._operation_id(operation, verb, path, seen_ids)
                try:
                    security = resolve_security(effective_security(operation, self.spec), self.spec)
                    parameters = operation_parameters(path_item, operation, self.spec)

                    request = requests.build(operation_id, verb, path, operation, parameters, security)
                    body = requests.body_source(operation)
                    acc = suggest_for_operation(
                        OperationSuggestions(operation_id, verb, path, self.estimates),
                        verb,
                        path,
                        operation,
                        request.parameters,
                        body[1] if body else None,
                        security,
                        self.spec,
                    )
                except (ValidationError, TypeError, ValueError, AttributeError) as e:
                    logger.warning("Skipping %s %s (%s): %s", verb.upper(), path, operation_id, e)
                    continue

                folder.requests.append(request)
                result.suggestions.extend(acc.suggestions)
                result.summary.total_estimated_hours += acc.hours
                for key, text in acc.legend.items():
                    result.legend.setdefault(key, text)

        result.folders = sorted(folders.values(), key=lambda f: f.name.casefold())
        result.summary.total_suggestions = len(result.suggestions)
        result.summary.total_estimated_hours = round(result.summary.total_estimated_hours, 4)
        result.variables = self._variables(result, requests.uses_basic_auth)
        logger.info(
            "Analysis complete. Processed %d paths and %d operations.",
            result.summary.total_paths,
            result.summary.total_operations,
        )
        return result

    def _operation_id(self, operation: dict, verb: str, path: str, seen: dict[str, int]) -> str:
        operation_id = str(operation.get("operationId") or f"{verb.upper()} {path}")
        if not self.config.unique_operation_ids:
            return operation_id
        count = seen.get(operation_id, 0) + 1
        seen[operation_id] = count
        if count == 1:
            return operation_id
        unique = f"{operation_id}_{count}"
        logger.warning("Duplicate operationId '%s' for %s %s; using '%s'", operation_id, verb.upper(), path, unique)
        return unique

    def _variables(self, result: AnalysisResult, uses_basic_auth: bool) -> list[KeyValue]:
        cfg = self.config
        variables = [
            KeyValue(
                key=variable_name(cfg.base_url_var),
                value=result.base_url,
                type="string",
                description=f"Extracted from OpenAPI servers or default. Original: {result.server_url}",
            ),
            KeyValue(
                key=variable_name(cfg.token_var),
                value=cfg.token_value,
                type="string",
                description="Placeholder for Bearer token or similar credentials",
            ),
            KeyValue(
                key=variable_name(cfg.api_key_var),
                value=cfg.api_key_value,
                type="string",
                description="Placeholder for API Key credentials",
            ),
            KeyValue(
                key=variable_name(cfg.resource_id_var),
                value=cfg.resource_id_value,
                type="string",
                description="Placeholder for a valid resource ID (e.g., for GET/PUT/DELETE)",
            ),
            KeyValue(
                key=variable_name(cfg.non_existent_id_var),
                value=cfg.non_existent_id_value,
                type="string",
                description="Placeholder for a non-existent resource ID (for 404 tests)",
            ),
        ]
        if uses_basic_auth:
            variables.append(
                KeyValue(key=variable_name(cfg.username_var), value=cfg.username_value, type="string", description="Username for Basic Auth")
            )
            variables.append(
                KeyValue(key=variable_name(cfg.password_var), value=cfg.password_value, type="string", description="Password for Basic Auth")
            )
        return variables


def analyze_openapi(
    file_path: Path,
    config: AnalyzerConfig | None = None,
    clock: Callable[[], datetime] | None = None,
    uuid_factory: Callable[[], uuid.UUID] | None = None,
) -> AnalysisResult | None:
    """Load and analyze an OpenAPI file. Returns None on fatal errors."""
    file_path = Path(file_path)
    logger.info("Reading OpenAPI spec from: %s", file_path)
    try:
        spec = load_spec(file_path)
    except SpecLoadError as e:
        logger.error("Error reading or parsing OpenAPI file: %s", e)
        return None
    analyzer = OperationAnalyzer(spec, config=config, clock=clock, uuid_factory=uuid_factory)
    return analyzer.analyze(source_name=file_path.name)
