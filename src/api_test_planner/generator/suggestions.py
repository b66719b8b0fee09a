"""Suggested test cases and effort estimates per operation.

Each rule fires under a condition derived from the operation (verb,
declared responses, parameters, body schema, security) and adds one
suggestion carrying the hours from the estimation table.
"""

from api_test_planner.models import Param, ParamLocation, SecurityDescriptor, SuggestionType, TestSuggestion
from api_test_planner.parser.refs import deref
from api_test_planner.reports.formatting import format_number_comma_decimal

S = SuggestionType

ESTIMATED_HOURS: dict[SuggestionType, float] = {
    S.HAPPY_PATH: 0.75,
    S.CONTRACT: 0.25,
    S.AUTH_MISSING: 0.25,
    S.AUTH_INVALID: 0.25,
    S.REQUIRED_MISSING: 0.15,
    S.INVALID_TYPE: 0.15,
    S.INVALID_FORMAT: 0.20,
    S.MALFORMED_BODY: 0.30,
    S.GET_NOT_FOUND: 0.25,
    S.GET_FILTERING: 0.50,
    S.POST_CREATED: 0.25,
    S.POST_CONFLICT: 0.40,
    S.PUT_PATCH_NOT_FOUND: 0.25,
    S.PUT_IDEMPOTENCY: 0.25,
    S.DELETE_NOT_FOUND: 0.25,
    S.DELETE_VERIFY: 0.35,
    S.DELETE_IDEMPOTENCY: 0.25,
    S.SECURITY_HEADERS: 0.15,
    S.PERFORMANCE: 0.10,
}

# Localized labels used by the CSV/HTML reports
TYPE_LABELS_ES: dict[SuggestionType, str] = {
    S.HAPPY_PATH: "Camino Feliz",
    S.CONTRACT: "Prueba de Contrato (Esquema)",
    S.AUTH_MISSING: "Autenticación: Sin Credenciales",
    S.AUTH_INVALID: "Autenticación: Credenciales Inválidas",
    S.REQUIRED_MISSING: "Validación: Requerido Ausente",
    S.INVALID_TYPE: "Validación: Tipo Inválido",
    S.INVALID_FORMAT: "Validación: Formato/Enum/Patrón Inválido",
    S.MALFORMED_BODY: "Validación: Cuerpo Malformado",
    S.GET_NOT_FOUND: "GET: No Encontrado (404)",
    S.GET_FILTERING: "GET: Filtrado/Paginación",
    S.POST_CREATED: "POST: Creado (Verificar 201)",
    S.POST_CONFLICT: "POST: Conflicto (Duplicado?)",
    S.PUT_PATCH_NOT_FOUND: "PUT/PATCH: No Encontrado (404)",
    S.PUT_IDEMPOTENCY: "PUT: Verificación Idempotencia",
    S.DELETE_NOT_FOUND: "DELETE: No Encontrado (404)",
    S.DELETE_VERIFY: "DELETE: Verificar Inaccesibilidad",
    S.DELETE_IDEMPOTENCY: "DELETE: Verificación Idempotencia",
    S.SECURITY_HEADERS: "Seguridad (Cabeceras Básicas)",
    S.PERFORMANCE: "Rendimiento (Verificación Básica)",
}

DESCRIPTIONS_ES: dict[SuggestionType, str] = {
    S.HAPPY_PATH: "[{verb}] ¿Responde correctamente con datos válidos? (Status 2xx)",
    S.CONTRACT: "¿La estructura de la respuesta coincide con la definición OpenAPI?",
    S.AUTH_MISSING: "¿Bloquea el acceso si no se envían credenciales? (Status 401)",
    S.AUTH_INVALID: "¿Bloquea el acceso si las credenciales son inválidas? (Status 401)",
    S.REQUIRED_MISSING: "¿Maneja parámetros/campos requeridos ausentes? (Status 400/422)",
    S.INVALID_TYPE: "¿Maneja tipos de datos incorrectos en parámetros/campos? (Status 400/422)",
    S.INVALID_FORMAT: "¿Maneja formatos, enums o patrones inválidos? (Status 400/422)",
    S.MALFORMED_BODY: "¿Maneja cuerpos de solicitud malformados (e.g., JSON inválido)? (Status 400)",
    S.GET_NOT_FOUND: "[GET] ¿Maneja correctamente la solicitud de un recurso inexistente? (Status 404)",
    S.GET_FILTERING: "[GET] ¿Funcionan los parámetros de filtrado, paginación u ordenamiento?",
    S.POST_CREATED: "[POST] ¿Se crea el recurso y responde con 201 Created?",
    S.POST_CONFLICT: "[POST] ¿Evita la creación de duplicados si la lógica lo requiere? (Status 409)",
    S.PUT_PATCH_NOT_FOUND: "[PUT/PATCH] ¿Maneja intento de actualizar un recurso inexistente? (Status 404)",
    S.PUT_IDEMPOTENCY: "[PUT] ¿Múltiples requests idénticas tienen el mismo efecto que una sola?",
    S.DELETE_NOT_FOUND: "[DELETE] ¿Maneja intento de eliminar un recurso inexistente? (Status 404)",
    S.DELETE_VERIFY: "[DELETE] Tras eliminar, ¿el recurso ya no es accesible vía GET? (Requiere encadenamiento)",
    S.DELETE_IDEMPOTENCY: "[DELETE] ¿Múltiples requests idénticas tienen el mismo efecto que una sola?",
    S.SECURITY_HEADERS: "¿Incluye cabeceras básicas de seguridad en la respuesta?",
    S.PERFORMANCE: "¿El tiempo de respuesta está dentro de límites aceptables?",
}

FILTER_PARAM_HINTS = ("filter", "page", "limit", "sort")


def type_label(suggestion_type: SuggestionType) -> str:
    return TYPE_LABELS_ES.get(suggestion_type, "Descripción no disponible")


def type_description(suggestion_type: SuggestionType, verb: str) -> str:
    template = DESCRIPTIONS_ES.get(suggestion_type)
    if template is None:
        return f"Descripción para {suggestion_type.value}"
    return template.format(verb=verb.upper())


def legend_entry(suggestion_type: SuggestionType, hours: float) -> str:
    return f"Estimated effort: {format_number_comma_decimal(hours)}h. Basic check for {suggestion_type.value.lower()}."


def estimation_table(overrides: dict[str, float] | None = None) -> dict[SuggestionType, float]:
    """The hours table with per-type overrides applied (keys are type labels)."""
    table = dict(ESTIMATED_HOURS)
    for key, hours in (overrides or {}).items():
        table[SuggestionType(key)] = hours
    return table


class OperationSuggestions:
    """Collects the suggestions of a single operation.

    The analyzer merges ``suggestions``, ``hours`` and ``legend`` into the
    run-wide result once the operation is done.
    """

    def __init__(self, operation_id: str, verb: str, path: str, estimates: dict[SuggestionType, float] | None = None):
        self.operation_id = operation_id
        self.verb = verb.upper()
        self.path = path
        self.estimates = estimates if estimates is not None else ESTIMATED_HOURS
        self.suggestions: list[TestSuggestion] = []
        self.hours = 0.0
        self.legend: dict[str, str] = {}

    def add(self, suggestion_type: SuggestionType, condition: bool = True, details: str = "") -> None:
        hours = self.estimates.get(suggestion_type) or 0
        if not condition or hours <= 0:
            return
        description = f"{suggestion_type.value} ({details})" if details else suggestion_type.value
        self.suggestions.append(
            TestSuggestion(
                operation_id=self.operation_id,
                verb=self.verb,
                path=self.path,
                type=suggestion_type,
                description=description,
                estimated_hours=hours,
            )
        )
        self.hours += hours
        self.legend.setdefault(suggestion_type.value, legend_entry(suggestion_type, hours))


def _has_constraint(schema: dict) -> bool:
    return bool(schema.get("format") or schema.get("enum") or schema.get("pattern"))


def suggest_for_operation(
    acc: OperationSuggestions,
    verb: str,
    path: str,
    operation: dict,
    parameters: list[Param],
    body_schema: dict | None,
    security: SecurityDescriptor | None,
    spec: dict,
) -> OperationSuggestions:
    """Apply every suggestion rule to one operation, in a fixed order."""
    verb = verb.lower()
    responses = operation.get("responses") or {}
    declared = {str(code) for code in responses}

    acc.add(S.HAPPY_PATH)
    acc.add(S.CONTRACT, "200" in declared or "201" in declared)

    acc.add(S.AUTH_MISSING, security is not None)
    acc.add(S.AUTH_INVALID, security is not None)

    for p in parameters:
        if p.required:
            acc.add(S.REQUIRED_MISSING, details=f"{p.location.value} param: {p.name}")
    for p in parameters:
        acc.add(S.INVALID_TYPE, details=f"{p.location.value} param: {p.name}")
        param_schema = deref(p.param_schema, spec)
        if isinstance(param_schema, dict) and _has_constraint(param_schema):
            acc.add(S.INVALID_FORMAT, details=f"{p.location.value} param: {p.name}")

    if body_schema:
        acc.add(S.MALFORMED_BODY)
        resolved = deref(body_schema, spec)
        resolved = resolved if isinstance(resolved, dict) else {}
        for field in resolved.get("required") or []:
            acc.add(S.REQUIRED_MISSING, details=f"body field: {field}")
        props = [p for p in (resolved.get("properties") or {}).values() if isinstance(p, dict)]
        acc.add(S.INVALID_TYPE, any(p.get("type") for p in props), "body field type")
        acc.add(S.INVALID_FORMAT, any(_has_constraint(p) for p in props), "body field format/enum/pattern")

    has_path_id = "{" in path and "}" in path
    if verb == "get":
        acc.add(S.GET_NOT_FOUND, has_path_id)
        acc.add(
            S.GET_FILTERING,
            any(
                p.location is ParamLocation.QUERY and any(hint in p.name.lower() for hint in FILTER_PARAM_HINTS)
                for p in parameters
            ),
        )
    elif verb == "post":
        acc.add(S.POST_CREATED, "201" in declared)
        acc.add(S.POST_CONFLICT, "409" in declared)
    elif verb == "put":
        acc.add(S.PUT_PATCH_NOT_FOUND, has_path_id)
        acc.add(S.PUT_IDEMPOTENCY, has_path_id)
    elif verb == "patch":
        acc.add(S.PUT_PATCH_NOT_FOUND, has_path_id)
    elif verb == "delete":
        acc.add(S.DELETE_NOT_FOUND, has_path_id)
        acc.add(S.DELETE_VERIFY, has_path_id)
        acc.add(S.DELETE_IDEMPOTENCY, has_path_id)

    acc.add(S.SECURITY_HEADERS)
    acc.add(S.PERFORMANCE)
    return acc
