"""
Error taxonomy for CineSearch.

Client-input errors are raised before any upstream call is made.
Upstream errors never carry provider detail beyond "not found".
"""

from typing import Optional


class CineSearchError(Exception):
    """Base error with a stable machine-readable code."""

    code = "cinesearch_error"
    default_message = "Request could not be completed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# =============================================================================
# CLIENT INPUT
# =============================================================================

class SearchValidationError(CineSearchError):
    """Invalid client input. Never retried."""

    code = "validation_error"


class MissingCriteria(SearchValidationError):
    code = "missing_criteria"
    default_message = (
        "Provide at least one search parameter: query, year, genre, cast, or director."
    )


class InvalidYear(SearchValidationError):
    code = "invalid_year"
    default_message = "Invalid year."


class InvalidPage(SearchValidationError):
    code = "invalid_page"
    default_message = "page must be an integer between 1 and 500."


class InvalidGenre(SearchValidationError):
    code = "invalid_genre"
    default_message = "genre must be a numeric TMDB genre ID."


class NameTooLong(SearchValidationError):
    code = "name_too_long"

    def __init__(self, field_name: str, max_length: int = 100):
        self.field_name = field_name
        self.max_length = max_length
        super().__init__(f"{field_name} parameter too long (max {max_length} characters).")


class InvalidMovieId(SearchValidationError):
    code = "invalid_movie_id"
    default_message = "Invalid movie ID."


# =============================================================================
# UPSTREAM PROVIDER
# =============================================================================

class UpstreamError(CineSearchError):
    """Failure talking to the movie catalog provider."""

    code = "upstream_error"

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message)


class UpstreamUnavailable(UpstreamError):
    """Transport error, timeout, or non-2xx status other than 404."""

    code = "upstream_unavailable"
    default_message = "Failed to fetch data from the movie provider."

    def __init__(self, path: str, status: Optional[int] = None):
        self.status = status
        super().__init__(path)


class UpstreamNotFound(UpstreamError):
    code = "not_found"
    default_message = "Resource not found."


# =============================================================================
# ABUSE CONTROL
# =============================================================================

class RateLimited(CineSearchError):
    """Client address exceeded the hard request ceiling."""

    code = "rate_limited"
    default_message = "Too many requests - please wait a moment and try again."

    def __init__(self, limit: int, count: int, reset_after: float):
        self.limit = limit
        self.count = count
        self.reset_after = reset_after
        super().__init__()
