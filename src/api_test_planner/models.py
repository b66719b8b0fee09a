"""Data models shared by the analyzer, the collection exporter and the reports.

The analyzer turns an OpenAPI document into these records; everything
downstream only reads them.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SecurityType(str, Enum):
    API_KEY = "apiKey"
    HTTP = "http"
    OAUTH2 = "oauth2"
    OPENID_CONNECT = "openIdConnect"


class ParamLocation(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class BodyMode(str, Enum):
    RAW = "raw"
    URLENCODED = "urlencoded"
    FORMDATA = "formdata"


class SuggestionType(str, Enum):
    """Closed set of suggested test kinds."""

    HAPPY_PATH = "Happy Path"
    CONTRACT = "Contract Test (Response Schema)"
    AUTH_MISSING = "Auth: Missing Credentials"
    AUTH_INVALID = "Auth: Invalid Credentials"
    REQUIRED_MISSING = "Validation: Required Missing"
    INVALID_TYPE = "Validation: Invalid Type"
    INVALID_FORMAT = "Validation: Invalid Format/Enum/Pattern"
    MALFORMED_BODY = "Validation: Malformed Body"
    GET_NOT_FOUND = "GET: Not Found (404)"
    GET_FILTERING = "GET: Filtering/Pagination (if params exist)"
    POST_CREATED = "POST: Created (201 Check)"
    POST_CONFLICT = "POST: Conflict (Duplicate?)"
    PUT_PATCH_NOT_FOUND = "PUT/PATCH: Not Found (404)"
    PUT_IDEMPOTENCY = "PUT: Idempotency Check"
    DELETE_NOT_FOUND = "DELETE: Not Found (404)"
    DELETE_VERIFY = "DELETE: Verify Inaccessible (needs GET)"
    DELETE_IDEMPOTENCY = "DELETE: Idempotency Check"
    SECURITY_HEADERS = "Security (Basic Headers, e.g., HSTS)"
    PERFORMANCE = "Performance (Basic Check)"


class SecurityDescriptor(BaseModel):
    """The single authentication scheme resolved for an operation."""

    scheme_name: str
    type: SecurityType
    scheme: str | None = None  # bearer / basic for http
    location: str | None = None  # header / query / cookie for apiKey
    name: str | None = None


class KeyValue(BaseModel):
    """A header, query, path-variable, form field or collection variable entry."""

    key: str
    value: str = ""
    description: str = ""
    disabled: bool = False
    type: str = "text"


class Param(BaseModel):
    """A resolved operation parameter with its placeholder value."""

    name: str
    location: ParamLocation
    required: bool = False
    value: str
    description: str = ""
    param_schema: dict = {}


class RequestBody(BaseModel):
    mode: BodyMode
    content_type: str
    raw: str | None = None
    language: str | None = None  # "json" when raw holds serialized JSON
    fields: list[KeyValue] = []
    file_fields: list[str] = []  # formdata keys uploaded as files


class AuthDescriptor(BaseModel):
    """Postman-style auth helper: type plus its key/value entries."""

    type: str  # apikey / bearer / basic / oauth2 / noauth
    entries: list[KeyValue] = []


class RequestDescriptor(BaseModel):
    """The generated request shape for one operation."""

    operation_id: str
    name: str
    method: str
    path: str
    description: str = ""
    headers: list[KeyValue] = []
    path_variables: list[KeyValue] = []
    query: list[KeyValue] = []
    parameters: list[Param] = []
    body: RequestBody | None = None
    auth: AuthDescriptor | None = None


class TestSuggestion(BaseModel):
    """One recommended test case for an operation."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    operation_id: str
    verb: str
    path: str
    type: SuggestionType
    description: str
    estimated_hours: float


class Folder(BaseModel):
    name: str
    description: str = ""
    requests: list[RequestDescriptor] = []


class Summary(BaseModel):
    total_paths: int = 0
    total_operations: int = 0
    total_suggestions: int = 0
    total_estimated_hours: float = 0.0
    verb_counts: dict[str, int] = {}


class AnalysisResult(BaseModel):
    """Everything one analysis run produces."""

    title: str
    description: str = ""
    source_name: str = ""
    server_url: str = ""
    base_url: str
    folders: list[Folder] = []
    variables: list[KeyValue] = []
    suggestions: list[TestSuggestion] = []
    legend: dict[str, str] = Field(default_factory=dict)
    summary: Summary = Field(default_factory=Summary)
