"""Custom exceptions for mealplan_parser.

Parsing never raises for malformed content: unreadable ingredient lines and
broken embedded data degrade gracefully. The exceptions below cover the few
conditions a caller has to handle itself:

- a recipe URL rejected by the import guard (a user input error)
- a page fetch that failed (surface to the user, optionally retry)
- invalid configuration

Example:
    >>> try:
    ...     raise RecipeFetchError("Timed out", url="https://example.com", retryable=True)
    ... except MealplanParserError as e:
    ...     print(f"Error in {e.context}: {e}")
"""


class MealplanParserError(Exception):
    """Base exception for all mealplan_parser errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about where/when the error occurred
    """

    def __init__(self, message: str, **context: str | int | float | bool | None) -> None:
        """Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error description
            **context: Additional context (e.g., url="https://...", status_code=404)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class InvalidRecipeUrlError(MealplanParserError):
    """A recipe URL was rejected before any network call was made.

    Raised when the input is empty, uses a scheme other than http/https, or
    points at a loopback, private, link-local or otherwise internal host.

    Example:
        >>> raise InvalidRecipeUrlError(
        ...     "Please enter a valid public http(s) URL.",
        ...     url="192.168.1.5/recipe",
        ... )
    """

    pass


class RecipeFetchError(MealplanParserError):
    """Fetching a recipe page failed.

    Raised on transport failures and timeouts, non-2xx responses, redirects
    to disallowed hosts, redirect loops and empty bodies.

    Attributes:
        url: URL that was being fetched
        status_code: HTTP status of the failing response, if any
        retryable: Whether a caller may reasonably try again
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        retryable: bool = False,
        **context: str | int | float | bool | None,
    ) -> None:
        """Initialize fetch error with request metadata.

        Args:
            message: Human-readable error description
            url: URL that was being fetched
            status_code: HTTP status code of the response, if one was received
            retryable: Whether the failure is transient
            **context: Additional context
        """
        if url is not None:
            context["url"] = url
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, **context)
        self.url = url
        self.status_code = status_code
        self.retryable = retryable

    @classmethod
    def from_status(cls, url: str, status_code: int) -> "RecipeFetchError":
        """Build an error for a non-2xx response.

        Rate limiting (429) and server errors (5xx) are flagged retryable.
        """
        retryable = status_code == 429 or status_code >= 500
        return cls(
            f"Recipe page returned HTTP {status_code}.",
            url=url,
            status_code=status_code,
            retryable=retryable,
        )


class ConfigurationError(MealplanParserError):
    """Error in configuration or settings.

    Raised when:
    - Configuration file is invalid
    - Settings have invalid values
    - An unknown setting is updated

    Example:
        >>> raise ConfigurationError(
        ...     "fetch_timeout must be positive",
        ...     fetch_timeout=0,
        ... )
    """

    pass
