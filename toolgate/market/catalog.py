"""Static catalog of managed market data tools.

The table is immutable: tools/list returns it verbatim and tools/call looks a
definition up by name, validates the arguments against its pydantic model and
builds the upstream REST path from the validated model.
"""

from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .exceptions import ArgumentValidationError, UnknownToolError
from .validators import (
    MIN_STATEMENT_YEAR,
    max_statement_year,
    normalize_bounded_int,
    normalize_frequency,
    normalize_iso_date,
    normalize_statement_type,
    normalize_symbol,
)

ISO_DATE_SCHEMA_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class StrictModel(BaseModel):
    """Base model that forbids unknown fields for strict schemas."""

    model_config = ConfigDict(extra="forbid")


class SymbolArgs(StrictModel):
    symbol: str

    @field_validator("symbol", mode="before")
    @classmethod
    def validate_symbol(cls, value: Any) -> str:
        return normalize_symbol(value)


class ListCompaniesArgs(StrictModel):
    limit: int = 200

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit(cls, value: Any) -> int:
        return normalize_bounded_int(value, minimum=1, maximum=500, label="limit")


class GetCompanyArgs(SymbolArgs):
    pass


class GetStatementArgs(SymbolArgs):
    frequency: str
    statement_type: str
    year: int | None = None

    @field_validator("frequency", mode="before")
    @classmethod
    def validate_frequency(cls, value: Any) -> str:
        return normalize_frequency(value)

    @field_validator("statement_type", mode="before")
    @classmethod
    def validate_statement_type(cls, value: Any) -> str:
        return normalize_statement_type(value)

    @field_validator("year", mode="before")
    @classmethod
    def validate_year(cls, value: Any) -> int:
        # Upper bound moves with the calendar, so it is checked at call time.
        return normalize_bounded_int(
            value, minimum=MIN_STATEMENT_YEAR, maximum=max_statement_year(), label="year"
        )


class GetAllStatementsArgs(SymbolArgs):
    frequency: str
    years: int = 5

    @field_validator("frequency", mode="before")
    @classmethod
    def validate_frequency(cls, value: Any) -> str:
        return normalize_frequency(value)

    @field_validator("years", mode="before")
    @classmethod
    def validate_years(cls, value: Any) -> int:
        return normalize_bounded_int(value, minimum=1, maximum=10, label="years")


class GetPriceDataArgs(SymbolArgs):
    start_date: str
    end_date: str

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def validate_dates(cls, value: Any, info) -> str:
        return normalize_iso_date(value, info.field_name)

    @model_validator(mode="after")
    def check_range(self) -> "GetPriceDataArgs":
        # ISO dates compare correctly as strings
        if self.start_date > self.end_date:
            raise ArgumentValidationError("start_date must be on or before end_date.")
        return self


def _segment(value: str) -> str:
    return quote(value, safe="")


def _statement_path(args: GetStatementArgs) -> str:
    path = f"/statement/{_segment(args.symbol)}/{args.frequency}/{args.statement_type}"
    if args.year is not None:
        path = f"{path}/{args.year}"
    return path


def _slice_companies(payload: Any, args: ListCompaniesArgs) -> Any:
    if isinstance(payload, list):
        return payload[: args.limit]
    return payload


@dataclass(frozen=True)
class ManagedToolDefinition:
    """One managed tool: its public schema and how it maps onto the REST source."""

    name: str
    description: str
    args_model: type[StrictModel]
    input_schema: dict[str, Any]
    path_builder: Callable[[Any], str]
    post_process: Callable[[Any, Any], Any] | None = None

    def to_descriptor(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


_SYMBOL_PROPERTY = {"type": "string", "description": "Ticker symbol, e.g. GK."}
_FREQUENCY_PROPERTY = {"type": "string", "enum": ["Annual", "Quarterly"]}
_DATE_PROPERTY = {"type": "string", "pattern": ISO_DATE_SCHEMA_PATTERN}

MANAGED_TOOLS: tuple[ManagedToolDefinition, ...] = (
    ManagedToolDefinition(
        name="list_companies",
        description="List companies on the Jamaican market.",
        args_model=ListCompaniesArgs,
        input_schema={
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": 500,
                    "description": "Maximum number of companies to return (default 200).",
                },
            },
        },
        path_builder=lambda args: "/company",
        post_process=_slice_companies,
    ),
    ManagedToolDefinition(
        name="get_company",
        description="Get company profile for a JSE ticker symbol.",
        args_model=GetCompanyArgs,
        input_schema={
            "type": "object",
            "additionalProperties": False,
            "required": ["symbol"],
            "properties": {"symbol": _SYMBOL_PROPERTY},
        },
        path_builder=lambda args: f"/company/{_segment(args.symbol)}",
    ),
    ManagedToolDefinition(
        name="get_statement",
        description="Get one income/balance/cashflow statement for a symbol.",
        args_model=GetStatementArgs,
        input_schema={
            "type": "object",
            "additionalProperties": False,
            "required": ["symbol", "frequency", "statement_type"],
            "properties": {
                "symbol": _SYMBOL_PROPERTY,
                "frequency": _FREQUENCY_PROPERTY,
                "statement_type": {"type": "string", "enum": ["IS", "BS", "CF"]},
                "year": {"type": "integer", "minimum": MIN_STATEMENT_YEAR, "maximum": 2100},
            },
        },
        path_builder=_statement_path,
    ),
    ManagedToolDefinition(
        name="get_all_statements",
        description="Get multiple years of statements for a symbol.",
        args_model=GetAllStatementsArgs,
        input_schema={
            "type": "object",
            "additionalProperties": False,
            "required": ["symbol", "frequency"],
            "properties": {
                "symbol": _SYMBOL_PROPERTY,
                "frequency": _FREQUENCY_PROPERTY,
                "years": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": 10,
                    "description": "How many years to retrieve (default 5).",
                },
            },
        },
        path_builder=lambda args: (
            f"/all_statements/{_segment(args.symbol)}/{args.frequency}/{args.years}"
        ),
    ),
    ManagedToolDefinition(
        name="get_price_data",
        description="Get historical closing price and volume for a date range.",
        args_model=GetPriceDataArgs,
        input_schema={
            "type": "object",
            "additionalProperties": False,
            "required": ["symbol", "start_date", "end_date"],
            "properties": {
                "symbol": _SYMBOL_PROPERTY,
                "start_date": _DATE_PROPERTY,
                "end_date": _DATE_PROPERTY,
            },
        },
        path_builder=lambda args: (
            f"/price_data/{_segment(args.symbol)}/{args.start_date}/{args.end_date}"
        ),
    ),
)

_TOOLS_BY_NAME = {tool.name: tool for tool in MANAGED_TOOLS}


def list_tool_descriptors() -> list[dict[str, Any]]:
    """Return the tools/list payload."""
    return [tool.to_descriptor() for tool in MANAGED_TOOLS]


def get_tool_definition(name: str) -> ManagedToolDefinition:
    try:
        return _TOOLS_BY_NAME[name]
    except KeyError:
        raise UnknownToolError(name) from None


def _first_error_message(exc: ValidationError) -> str:
    """Reduce a pydantic ValidationError to one caller-facing sentence."""
    error = exc.errors()[0]
    cause = (error.get("ctx") or {}).get("error")
    if isinstance(cause, ArgumentValidationError):
        return cause.message

    field = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
    if error["type"] == "missing":
        return f"{field} is required."
    if error["type"] == "extra_forbidden":
        return f"Unexpected argument: {field}."
    return f"{field}: {error['msg']}"


def validate_tool_arguments(
    name: str, arguments: dict[str, Any] | None
) -> tuple[ManagedToolDefinition, StrictModel]:
    """Look up a tool and validate its arguments.

    Args:
        name: Tool name.
        arguments: Raw arguments object; None is treated as empty.

    Returns:
        The tool definition and the validated argument model.

    Raises:
        UnknownToolError: If the tool is not in the catalog.
        ArgumentValidationError: If any argument is missing, unknown or invalid.
    """
    definition = get_tool_definition(name)
    try:
        model = definition.args_model.model_validate(arguments or {})
    except ValidationError as exc:
        raise ArgumentValidationError(_first_error_message(exc)) from exc
    return definition, model
