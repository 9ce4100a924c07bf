from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, quote, urlsplit

DEFAULT_IMAGE_PROXY_BASE = "https://images.weserv.nl/"
NO_IMAGE_URL = "https://placehold.co/400x600?text=No+Image"

_ABSOLUTE_RE = re.compile(r"^https?://", re.IGNORECASE)
_BAD_HOST_CHARS_RE = re.compile(r"[\s<>\"{}|\\^`]")
_DEFAULT_PORTS = {"http": 80, "https": 443}

# Same set JavaScript's encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"
# Keep existing escapes and sub-delimiters; only encode what a browser would.
_PATH_SAFE = "/%:@!$&'()*+,;=~"
_QUERY_SAFE = "/?%:@!$&'()*+,;=~"


def make_absolute(url: str) -> str:
    """`//host/p` -> `https://host/p`; `host/p` or `/host/p` -> `https://host/p`."""
    u = url.strip()
    if u.startswith("//"):
        u = "https:" + u
    if not _ABSOLUTE_RE.match(u):
        u = "https://" + u.lstrip("/")
    return u


def is_proxied(url: str, proxy_base: str = DEFAULT_IMAGE_PROXY_BASE) -> bool:
    """True when `url` already points at `proxy_base` with a `url=` parameter."""
    try:
        candidate = urlsplit(url)
        base = urlsplit(proxy_base)
    except ValueError:
        return False
    if candidate.netloc.lower() != base.netloc.lower():
        return False
    if (candidate.path or "/").rstrip("/") != (base.path or "/").rstrip("/"):
        return False
    return bool(parse_qs(candidate.query).get("url"))


def _host_path_query(absolute: str) -> str:
    """Rebuild `host + path + query` from an absolute URL; the fragment is dropped.

    Raises ValueError when the URL cannot be parsed into a usable host.
    """
    parts = urlsplit(absolute)
    hostname = parts.hostname
    if not hostname or _BAD_HOST_CHARS_RE.search(hostname):
        raise ValueError(f"unparseable host in {absolute!r}")
    if ":" in hostname:
        hostname = f"[{hostname}]"
    port = parts.port
    if port is not None and port != _DEFAULT_PORTS.get(parts.scheme.lower()):
        hostname = f"{hostname}:{port}"
    path = quote(parts.path or "/", safe=_PATH_SAFE)
    query = f"?{quote(parts.query, safe=_QUERY_SAFE)}" if parts.query else ""
    return f"{hostname}{path}{query}"


def normalize_poster_url(
    url: Optional[str],
    *,
    proxy_base: str = DEFAULT_IMAGE_PROXY_BASE,
) -> Optional[str]:
    """Make a poster URL absolute and route it through the image proxy.

    Many poster hosts block hotlinking or cross-origin loads, so every image is
    served via `<proxy_base>?url=<encoded host+path+query>`.

    - empty/absent input is returned unchanged (see `with_poster_fallback`)
    - an address already routed through `proxy_base` is returned as-is
    - if the absolute URL cannot be parsed, it is returned without proxying
    """
    if not url or not url.strip():
        return url
    absolute = make_absolute(url)
    if is_proxied(absolute, proxy_base):
        return absolute
    try:
        host_path = _host_path_query(absolute)
    except ValueError:
        return absolute
    return f"{proxy_base}?url={quote(host_path, safe=_URI_COMPONENT_SAFE)}"


def with_poster_fallback(
    url: Optional[str],
    *,
    proxy_base: str = DEFAULT_IMAGE_PROXY_BASE,
    fallback: str = NO_IMAGE_URL,
) -> str:
    """Write-time variant: never returns an empty value."""
    if not url or not url.strip():
        return fallback
    if url.strip() == fallback:
        return fallback
    return normalize_poster_url(url, proxy_base=proxy_base) or fallback


def display_poster_url(url: Optional[str], *, fallback: str = NO_IMAGE_URL) -> str:
    """Absolute URL for direct display, without proxying."""
    if not url or not url.strip():
        return fallback
    return make_absolute(url)
