"""Per-operation security resolution."""

import logging

from api_test_planner.models import SecurityDescriptor, SecurityType

logger = logging.getLogger(__name__)


def effective_security(operation: dict, spec: dict) -> list | None:
    """Operation-level ``security`` wins whenever the key is present, even if empty."""
    if "security" in operation:
        return operation["security"]
    return spec.get("security")


def _security_schemes(spec: dict) -> dict:
    schemes = (spec.get("components") or {}).get("securitySchemes")
    if schemes is None:
        schemes = spec.get("securityDefinitions")  # Swagger 2.0
    return schemes or {}


def resolve_security(requirements: list | None, spec: dict) -> SecurityDescriptor | None:
    """Extract one usable auth descriptor.

    Only the first requirement object is considered, and only the first
    scheme name inside it; AND-combined schemes and scopes are ignored.
    """
    if not requirements:
        return None
    first = requirements[0]
    if not isinstance(first, dict) or not first:
        return None

    scheme_name = next(iter(first))
    scheme = _security_schemes(spec).get(scheme_name)
    if not isinstance(scheme, dict):
        logger.warning("Security scheme '%s' not found in components.securitySchemes", scheme_name)
        return None

    scheme_type = scheme.get("type")
    http_scheme = scheme.get("scheme")
    if scheme_type == "basic":  # Swagger 2.0
        scheme_type, http_scheme = "http", "basic"
    try:
        security_type = SecurityType(scheme_type)
    except ValueError:
        logger.warning("Unsupported security scheme type '%s' for '%s'", scheme_type, scheme_name)
        return None

    return SecurityDescriptor(
        scheme_name=scheme_name,
        type=security_type,
        scheme=http_scheme,
        location=scheme.get("in"),
        name=scheme.get("name"),
    )
