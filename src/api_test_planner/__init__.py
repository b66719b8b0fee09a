"""Generate a Postman collection and a test-effort report from OpenAPI documents."""

__version__ = "0.1.0"
