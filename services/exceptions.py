class ShortenerError(Exception):
    """Base class for URL shortener domain errors."""


class InvalidUrlError(ShortenerError):
    """Raised when a URL is not an absolute http(s) URL."""


class AliasConflictError(ShortenerError):
    """Raised when a requested custom short code is already taken."""

    def __init__(self, short_code: str):
        super().__init__(f"Custom short code already exists: {short_code}")
        self.short_code = short_code


class GenerationExhaustedError(ShortenerError):
    """Raised when no free short code was found within the retry budget."""

    def __init__(self, attempts: int):
        super().__init__(f"Failed to generate unique short code after {attempts} attempts")
        self.attempts = attempts


class ShortCodeNotFoundError(ShortenerError):
    """Raised when a short code does not exist."""


class UrlExpiredError(ShortCodeNotFoundError):
    """Raised when a short URL has expired."""


class InvalidCharacterError(ShortenerError, ValueError):
    """Raised when a base62 string contains a character outside the alphabet."""

    def __init__(self, character: str):
        super().__init__(f"Invalid character in Base62 string: {character!r}")
        self.character = character


class DuplicateKeyError(ShortenerError):
    """Raised by a store when the short code is already persisted."""

    def __init__(self, short_code: str):
        super().__init__(f"Short code already stored: {short_code}")
        self.short_code = short_code


class InvalidExpiryError(ShortenerError):
    """Raised when an expiry lies beyond the representable date range."""
