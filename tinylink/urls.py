from urllib.parse import urlsplit, urlunsplit

from tinylink.errors import InvalidInput

DEFAULT_PORTS = {"http": 80, "https": 443, "ftp": 21, "ws": 80, "wss": 443}
BLOCKED_SCHEMES = {"javascript", "data"}

INVALID_URL = "Invalid URL provided"


def normalize_url(raw: str | None) -> str:
    """Validate an absolute URL with a host and return it re-serialized.

    Scheme and host are lowercased. For schemes with a well-known default
    port (http, https, ftp, ws, wss) that port is dropped and an empty
    path becomes ``/``. Query and fragment are kept as given.
    """
    s = (raw or "").strip()
    if not s:
        raise InvalidInput("longUrl is required")
    if any(ch.isspace() for ch in s):
        raise InvalidInput(INVALID_URL)

    try:
        parts = urlsplit(s)
        port = parts.port
    except ValueError:
        raise InvalidInput(INVALID_URL)

    scheme = parts.scheme.lower()
    hostname = (parts.hostname or "").lower()
    if not scheme or scheme in BLOCKED_SCHEMES or not hostname:
        raise InvalidInput(INVALID_URL)

    host = f"[{hostname}]" if ":" in hostname else hostname
    default_port = DEFAULT_PORTS.get(scheme)
    netloc = host if port is None or port == default_port else f"{host}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo += f":{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = parts.path
    if not path and default_port is not None:
        path = "/"
    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


def build_short_url(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/{code}"
