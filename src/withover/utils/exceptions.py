"""Custom exception hierarchy."""

from typing import Optional


class WithoverError(Exception):
    """Base exception for withover-specific failures."""

    def __init__(
        self, message: str, suggestion: Optional[str] = None, context: Optional[dict] = None
    ):
        """Initialize exception with message, optional suggestion, and context.

        Args:
            message: Error message
            suggestion: Optional suggestion for fixing the error
            context: Optional dictionary with additional context
        """
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with suggestion if available."""
        msg = self.message
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            msg += f"\n\nContext: {context_str}"
        return msg


class ConfigurationError(WithoverError):
    """Raised when a query, CTE list or window specification is invalid."""

    def __init__(
        self, message: str, suggestion: Optional[str] = None, context: Optional[dict] = None
    ):
        """Initialize configuration error.

        Common suggestions:
        - Give every CTE a distinct name
        - Supply an offset for PRECEDING / FOLLOWING frame bounds
        - Build the base query before compiling it
        """
        if suggestion is None:
            lowered = message.lower()
            if "duplicate" in lowered:
                suggestion = (
                    "CTE names must be unique within a single WITH clause. "
                    "Rename one of the sub-queries."
                )
            elif "offset" in lowered:
                suggestion = (
                    "PRECEDING and FOLLOWING bounds need a non-negative offset, e.g. "
                    "FrameBound.preceding(2); UNBOUNDED PRECEDING, CURRENT ROW and "
                    "UNBOUNDED FOLLOWING take none."
                )
            elif "base query" in lowered:
                suggestion = (
                    "Start from db.table('name') or call select_from_cte('name') "
                    "before compiling."
                )
            elif "identifier" in lowered or "name" in lowered:
                suggestion = (
                    "Names must be valid identifiers (letters, digits, underscores, "
                    "not starting with a digit)."
                )
        super().__init__(message, suggestion, context)


class CompilationError(WithoverError):
    """Raised when compiled SQL and its parameters are inconsistent."""

    def __init__(
        self, message: str, suggestion: Optional[str] = None, context: Optional[dict] = None
    ):
        """Initialize compilation error.

        Common suggestions:
        - Check if the expression is supported inside a window clause
        - Report placeholder/parameter mismatches as bugs
        """
        if suggestion is None:
            if "placeholder" in message.lower():
                suggestion = (
                    "The emitted SQL and its parameter list disagree. This is a bug; "
                    "executing the statement would bind values to the wrong positions."
                )
            elif "unsupported" in message.lower():
                suggestion = (
                    "Only columns, literals, function calls, arithmetic, comparisons "
                    "and nested window expressions can be rendered."
                )
        super().__init__(message, suggestion, context)


class ExecutionError(WithoverError):
    """Raised when SQL execution fails."""

    def __init__(
        self, message: str, suggestion: Optional[str] = None, context: Optional[dict] = None
    ):
        """Initialize execution error."""
        if suggestion is None:
            if "no such table" in message.lower():
                suggestion = (
                    "The relation does not exist. If it is a CTE, make sure it was "
                    "declared with with_cte() on the same query."
                )
            elif "syntax error" in message.lower():
                suggestion = (
                    "There's a SQL syntax error. Use query.to_sql() to see the generated SQL "
                    "and check that the dialect supports window functions and CTEs."
                )
        super().__init__(message, suggestion, context)


class QueryTimeoutError(ExecutionError):
    """Raised when a query exceeds the configured timeout."""

    def __init__(
        self, message: str, timeout: Optional[float] = None, context: Optional[dict] = None
    ):
        suggestion = (
            "The query exceeded the timeout limit. Consider:\n"
            "  - Narrowing the CTE bodies with filters\n"
            "  - Increasing the timeout via query_timeout configuration"
        )
        if timeout is not None:
            context = context or {}
            context["timeout_seconds"] = timeout
        super().__init__(message, suggestion, context)


class DatabaseConnectionError(WithoverError):
    """Raised when database connection operations fail."""

    def __init__(
        self, message: str, suggestion: Optional[str] = None, context: Optional[dict] = None
    ):
        if suggestion is None:
            suggestion = (
                "Check your database connection string and ensure the database server is running."
            )
        super().__init__(message, suggestion, context)
