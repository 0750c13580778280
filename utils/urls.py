from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}
DEFAULT_LABEL = "localhost"

PATH_REDACTED = "/[path-redacted]"
PARAMS_REDACTED = "?[params-redacted]"
REDACTED_FALLBACK = "[redacted]"


def is_valid_url(url: str | None) -> bool:
    """True for absolute URLs with an http or https scheme and a host.

    Whitespace and control characters anywhere in the URL make it invalid.
    """
    if not url or any(char.isspace() or not char.isprintable() for char in url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ALLOWED_SCHEMES and bool(parts.netloc)


def extract_label(base_url: str) -> str:
    """Domain label for new mappings, taken from the public base URL."""
    try:
        host = urlsplit(base_url).hostname
    except ValueError:
        host = None
    return host or DEFAULT_LABEL


def build_short_url(base_url: str, short_code: str) -> str:
    return f"{base_url.rstrip('/')}/{short_code}"


def redact_url(url: str) -> str:
    """Keep scheme, host and a non-default port; mask path and query.

    ``https://example.com/a/b?x=1`` becomes
    ``https://example.com/[path-redacted]?[params-redacted]``.
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return REDACTED_FALLBACK
    if not parts.scheme or not host:
        return REDACTED_FALLBACK

    if ":" in host:
        host = f"[{host}]"
    redacted = f"{parts.scheme}://{host}"
    if port is not None and port != DEFAULT_PORTS.get(parts.scheme):
        redacted += f":{port}"
    if parts.path and parts.path != "/":
        redacted += PATH_REDACTED
    if parts.query:
        redacted += PARAMS_REDACTED
    return redacted
