"""Canonical Pydantic models shared across all mcpgen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Document views** -- read-only views over a dereferenced OpenAPI document:
    :class:`Document`, :class:`DocumentInfo`, :class:`ServerInfo`,
    :class:`Operation`, :class:`Parameter`, :class:`RequestBody`, and
    :class:`OperationRef`. Schema nodes are deliberately *not* modeled: they
    stay raw mappings so that the schema translator can remain total over
    whatever a document contains.

**Compiler output** -- the tagged input-schema variants (:class:`StringSchema`,
    :class:`NumberSchema`, :class:`IntegerSchema`, :class:`BooleanSchema`,
    :class:`ArraySchema`, :class:`ObjectSchema`) and :class:`ToolDescriptor`.

**Configuration** -- :class:`GeneratorOptions`, the immutable value threaded
    through every compile and emit call.

All models use Pydantic v2. Views and compiler output are frozen so that
nothing downstream of the compiler can mutate a descriptor after creation.
"""

from __future__ import annotations

import enum
import logging
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


# --- Enumerations ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


DEFAULT_METHODS: tuple[str, ...] = (
    HTTPMethod.GET.value,
    HTTPMethod.POST.value,
    HTTPMethod.PUT.value,
    HTTPMethod.PATCH.value,
    HTTPMethod.DELETE.value,
)
"""Verbs compiled into tools unless :attr:`GeneratorOptions.methods` says otherwise."""


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class HeaderMode(str, enum.Enum):
    """How a generated server decides which tool arguments become HTTP headers.

    ``HEURISTIC`` is the compatibility mode: argument names are matched against
    a naming convention at call time. ``DECLARED`` sends exactly the parameters
    the document declares with ``in: header``, under their wire names.
    """

    HEURISTIC = "heuristic"
    DECLARED = "declared"


class Transport(str, enum.Enum):
    """Transport bootstrap emitted at the bottom of a generated server."""

    STDIO = "stdio"
    HTTP = "http"


class QuoteStyle(str, enum.Enum):
    """Quote character used for string literals in generated source."""

    SINGLE = "single"
    DOUBLE = "double"


# --- Document views ---


class Parameter(BaseModel):
    """A single parameter declared on an OpenAPI operation.

    ``schema_`` holds the raw schema mapping (or ``None``) untouched; the
    schema translator interprets it.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    name: str
    location: ParameterLocation = Field(alias="in")
    required: bool = False
    description: Optional[str] = None
    schema_: Any = Field(default=None, alias="schema")


class RequestBody(BaseModel):
    """The ``requestBody`` of an operation, keyed by media type."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    required: bool = False
    description: Optional[str] = None
    content: dict[str, Any] = Field(default_factory=dict)

    def json_schema(self) -> Any:
        """Return the ``application/json`` schema node, or ``None`` when absent."""
        media = self.content.get("application/json")
        if isinstance(media, dict):
            return media.get("schema")
        return None


class Operation(BaseModel):
    """Immutable view of an OpenAPI *Operation Object*.

    Parameters that are not mappings, have no name, or declare an unknown
    ``in`` location are dropped while the view is built, so that one bad
    entry never prevents the rest of the operation from compiling.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    operation_id: Optional[str] = Field(default=None, alias="operationId")
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = Field(default=None, alias="requestBody")
    responses: dict[str, Any] = Field(default_factory=dict)
    deprecated: bool = False

    @field_validator("parameters", mode="before")
    @classmethod
    def _drop_invalid_parameters(cls, value: Any) -> list[Parameter]:
        if not isinstance(value, list):
            return []
        parameters: list[Parameter] = []
        for raw in value:
            if not isinstance(raw, dict):
                continue
            try:
                parameters.append(Parameter.model_validate(raw))
            except ValidationError as exc:
                logger.debug("Skipping parameter %r: %s", raw.get("name"), exc)
        return parameters

    @field_validator("request_body", mode="before")
    @classmethod
    def _ignore_non_mapping_body(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("tags", mode="before")
    @classmethod
    def _default_tags(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @field_validator("responses", mode="before")
    @classmethod
    def _default_responses(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class OperationRef(BaseModel):
    """One ``(path_pattern, method, operation)`` triple yielded by the extractor."""

    model_config = ConfigDict(frozen=True)

    path_pattern: str
    method: str
    operation: Operation


class DocumentInfo(BaseModel):
    """API metadata from the document's *Info Object*."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None


class ServerInfo(BaseModel):
    """A server entry from the document's ``servers`` array."""

    model_config = ConfigDict(frozen=True)

    url: str
    description: Optional[str] = None


class Document(BaseModel):
    """Read-only view of a fully dereferenced OpenAPI 3.x document.

    ``paths`` and ``components`` are kept as raw mappings; the operation
    extractor walks ``paths`` itself so that document key order is preserved.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    openapi: Optional[str] = None
    info: DocumentInfo = Field(default_factory=DocumentInfo)
    servers: list[ServerInfo] = Field(default_factory=list)
    paths: dict[str, Any] = Field(default_factory=dict)
    components: dict[str, Any] = Field(default_factory=dict)

    @field_validator("info", mode="before")
    @classmethod
    def _default_info(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("servers", mode="before")
    @classmethod
    def _keep_valid_servers(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [s for s in value if isinstance(s, dict) and isinstance(s.get("url"), str)]

    @field_validator("paths", "components", mode="before")
    @classmethod
    def _default_mapping(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @property
    def schemas(self) -> dict[str, Any]:
        """The ``components.schemas`` map (empty when absent)."""
        schemas = self.components.get("schemas")
        return schemas if isinstance(schemas, dict) else {}


# --- Input schema variants ---


class _InputSchemaBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_json_schema(self) -> dict[str, Any]:
        """Render the node as a plain JSON-Schema-like dict."""
        return self.model_dump(by_alias=True, exclude_none=True)


class StringSchema(_InputSchemaBase):
    type: Literal["string"] = "string"
    description: Optional[str] = None
    enum: Optional[list[Any]] = None
    format: Optional[str] = None


class NumberSchema(_InputSchemaBase):
    type: Literal["number"] = "number"
    description: Optional[str] = None
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None


class IntegerSchema(_InputSchemaBase):
    type: Literal["integer"] = "integer"
    description: Optional[str] = None
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None


class BooleanSchema(_InputSchemaBase):
    type: Literal["boolean"] = "boolean"
    description: Optional[str] = None


class ArraySchema(_InputSchemaBase):
    type: Literal["array"] = "array"
    description: Optional[str] = None
    items: InputSchema = Field(default_factory=StringSchema)


class ObjectSchema(_InputSchemaBase):
    type: Literal["object"] = "object"
    description: Optional[str] = None
    properties: Optional[dict[str, InputSchema]] = None
    required: Optional[list[str]] = None
    additional_properties: Optional[bool] = Field(default=None, alias="additionalProperties")


InputSchema = Annotated[
    Union[StringSchema, NumberSchema, IntegerSchema, BooleanSchema, ArraySchema, ObjectSchema],
    Field(discriminator="type"),
]
"""Tagged union of every input-schema node kind, discriminated on ``type``."""

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()


# --- Validation ---


class ValidationReport(BaseModel):
    """Outcome of the advisory check in :func:`~mcpgen.parser.loader.validate_document`.

    An invalid report never stops generation; the pipeline prints the errors
    as warnings and carries on.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)


# --- Compiler output ---


class ToolDescriptor(BaseModel):
    """A compiled tool bound to one HTTP operation.

    Created once per ``(path, method)`` pair by
    :func:`~mcpgen.compiler.tools.compile_tool` and consumed by the emitter.
    ``title`` and ``description`` are stored unescaped; the emitter escapes
    them when it writes string literals.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    title: str
    description: str
    input_schema: ObjectSchema
    http_method: str
    path_pattern: str
    header_params: dict[str, str] = Field(
        default_factory=dict,
        description="Input property name -> wire header name, for declared header parameters",
    )


# --- Configuration ---


class GeneratorOptions(BaseModel):
    """Immutable generation settings threaded through compile and emit calls.

    Resolved by :func:`~mcpgen.config.resolve_options` from CLI flags,
    ``MCPGEN_*`` environment variables, and a project-local ``mcpgen.json``.
    """

    model_config = ConfigDict(frozen=True)

    methods: tuple[str, ...] = Field(
        default=DEFAULT_METHODS, description="HTTP verbs compiled into tools"
    )
    indent_size: Literal[2, 4, 8] = Field(default=4, description="Indentation of generated source")
    quote_style: QuoteStyle = Field(
        default=QuoteStyle.DOUBLE, description="Quote character for generated string literals"
    )
    header_mode: HeaderMode = Field(
        default=HeaderMode.HEURISTIC, description="How tool arguments are promoted to headers"
    )
    dedupe_names: bool = Field(
        default=False, description="Suffix colliding tool names with _2, _3, ..."
    )
    base_url_env: str = Field(
        default="API_BASE_URL",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Environment variable overriding the base URL",
    )
    default_base_url: Optional[str] = Field(
        default=None,
        description="Fallback base URL (defaults to the document's first server)",
    )
    transport: Transport = Field(default=Transport.STDIO, description="Transport bootstrap")
    http_port: int = Field(default=3000, description="Port for the http transport")

    @field_validator("methods", mode="before")
    @classmethod
    def _normalise_methods(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [m for m in value.split(",") if m.strip()]
        if isinstance(value, (list, tuple)):
            return tuple(str(m).strip().lower() for m in value)
        return value
