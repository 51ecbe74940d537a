"""CLI support module for com-graph."""

from com_graph.cli.error_formatter import ErrorFormatter, ErrorTable, ErrorTree
from com_graph.cli.exception_handler import handle_exceptions
from com_graph.cli.pydantic_errors import (
    format_pydantic_location,
    get_suggestion_for_error,
    translate_pydantic_error,
)

__all__ = [
    "ErrorFormatter",
    "ErrorTable",
    "ErrorTree",
    "handle_exceptions",
    "format_pydantic_location",
    "get_suggestion_for_error",
    "translate_pydantic_error",
]
