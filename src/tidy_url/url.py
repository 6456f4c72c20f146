"""URL canonicalization: parse, apply the enabled cleaning rules, report changes."""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, replace
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from tidy_url.config import settings
from tidy_url.models import (
    NORMALIZED_PATH,
    REMOVED_DEFAULT_PORT,
    REMOVED_FRAGMENT,
    REMOVED_TRACKING,
    REMOVED_WWW,
    UPGRADED_TO_HTTPS,
    CleaningOptions,
    CleaningResult,
)
from tidy_url.probe import HttpsProbe, can_use_https
from tidy_url.tracking import TrackingClassifier, default_classifier

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

_UNRESERVED = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
)
# RFC 3986 pchar plus "/"; "%" is kept so existing escapes survive quoting
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_FRAGMENT_SAFE = _PATH_SAFE + "?"
_ESCAPE_RE = re.compile(r"%([0-9A-Fa-f]{2})")
_SLASH_RUN_RE = re.compile(r"/{2,}")


class InvalidUrlError(ValueError):
    """Raised when the input does not parse as an absolute URL with a host."""

    def __init__(self, url: object):
        super().__init__(f"Invalid URL: {url!r}")
        self.url = url


@dataclass
class _Parts:
    scheme: str
    userinfo: str
    host: str
    port: int | None
    path: str
    query: str
    fragment: str

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        netloc = f"{self.userinfo}@{host}" if self.userinfo else host
        if self.port is not None:
            netloc += f":{self.port}"
        return netloc

    def geturl(self) -> str:
        return urlunsplit((self.scheme, self.netloc, self.path, self.query, self.fragment))


def _normalize_escapes(text: str) -> str:
    """Decode escaped unreserved characters, upper-case the remaining escapes.

    Malformed escapes such as ``%zz`` do not match and are left alone.
    """
    def _fix(m: re.Match) -> str:
        char = chr(int(m.group(1), 16))
        return char if char in _UNRESERVED else m.group(0).upper()

    return _ESCAPE_RE.sub(_fix, text)


def _remove_dot_segments(path: str) -> str:
    if not path.startswith("/"):
        return path
    segments = path.split("/")
    resolved: list[str] = []
    for segment in segments[1:]:
        if segment == "..":
            if resolved:
                resolved.pop()
        elif segment != ".":
            resolved.append(segment)
    # "/a/.." and "/a/." keep the directory form
    if segments[-1] in (".", ".."):
        resolved.append("")
    return "/" + "/".join(resolved)


def _encode_host(host: str) -> str:
    if host.isascii():
        return host
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError as e:
        logger.debug("IDNA encoding failed for host %r: %s", host, e)
        return host


def _parse(url: object) -> _Parts:
    """Parse and syntactically normalize a URL. Nothing here is a reported change."""
    if not isinstance(url, str):
        raise InvalidUrlError(url)
    try:
        parsed = urlsplit(url.strip())
        port = parsed.port
    except ValueError as e:
        raise InvalidUrlError(url) from e

    if not parsed.scheme or not parsed.hostname or any(c.isspace() for c in parsed.netloc):
        raise InvalidUrlError(url)

    scheme = parsed.scheme.lower()
    userinfo = parsed.netloc.rpartition("@")[0] if "@" in parsed.netloc else ""

    # Lone surrogates cannot be UTF-8 encoded for percent-escaping
    try:
        path = _remove_dot_segments(_normalize_escapes(quote(parsed.path, safe=_PATH_SAFE)))
        query = urlencode(parse_qsl(parsed.query, keep_blank_values=True)) if parsed.query else ""
        fragment = _normalize_escapes(quote(parsed.fragment, safe=_FRAGMENT_SAFE))
    except UnicodeError as e:
        raise InvalidUrlError(url) from e

    if not path and scheme in DEFAULT_PORTS:
        path = "/"

    return _Parts(
        scheme=scheme,
        userinfo=userinfo,
        host=_encode_host(parsed.hostname),
        port=port,
        path=path,
        query=query,
        fragment=fragment,
    )


class UrlCleaner:
    """Canonicalize URLs.

    The HTTPS probe and the tracking classifier are injected so callers can
    share an HTTP client or extend the parameter tables. The cleaner holds no
    per-call state and can be used concurrently.
    """

    def __init__(
        self,
        *,
        probe: HttpsProbe | None = None,
        classifier: TrackingClassifier | None = None,
        probe_timeout: float | None = None,
    ):
        self.probe = probe or can_use_https
        self.classifier = classifier or default_classifier
        self.probe_timeout = (
            probe_timeout if probe_timeout is not None else settings.https_probe_timeout_seconds
        )

    async def clean(self, url: str, options: CleaningOptions | None = None) -> CleaningResult:
        """Clean a URL and describe each rule that changed it.

        Raises:
            InvalidUrlError: if ``url`` is not an absolute URL with a host.
        """
        options = options or CleaningOptions()
        parts = _parse(url)
        original = parts.geturl()
        changes: list[str] = []

        if options.try_https and parts.scheme == "http":
            if await self._https_available(parts):
                parts.scheme = "https"
                # The probe went to the https default port
                if parts.port == DEFAULT_PORTS["http"]:
                    parts.port = None
                changes.append(UPGRADED_TO_HTTPS)

        if options.remove_www and parts.host.startswith("www."):
            host = parts.host
            while host.startswith("www.") and len(host) > 4:
                host = host[4:]
            if host != parts.host:
                parts.host = host
                changes.append(REMOVED_WWW)

        if (
            options.remove_default_ports
            and parts.port is not None
            and parts.port == DEFAULT_PORTS.get(parts.scheme)
        ):
            parts.port = None
            changes.append(REMOVED_DEFAULT_PORT)

        if parts.query:
            self._clean_query(parts, options, changes)

        if options.remove_fragment and parts.fragment:
            parts.fragment = ""
            changes.append(REMOVED_FRAGMENT)

        path = _SLASH_RUN_RE.sub("/", parts.path)
        if options.remove_trailing_slash and path != "/" and path.endswith("/"):
            path = path[:-1]
        if path != parts.path:
            parts.path = path
            changes.append(NORMALIZED_PATH)

        cleaned = parts.geturl()
        if changes:
            logger.debug("Cleaned %s -> %s (%s)", original, cleaned, "; ".join(changes))
        return CleaningResult(original=original, cleaned=cleaned, changes=changes)

    def _clean_query(self, parts: _Parts, options: CleaningOptions, changes: list[str]) -> None:
        pairs = parse_qsl(parts.query, keep_blank_values=True)
        kept = pairs
        if options.remove_tracking:
            kept = [(k, v) for k, v in kept if not self.classifier.is_tracking(k)]
        if options.remove_empty_params:
            kept = [(k, v) for k, v in kept if v]
        if options.sort_params:
            kept = sorted(kept, key=lambda kv: kv[0])

        parts.query = urlencode(kept)
        removed = len(pairs) - len(kept)
        if removed:
            logger.debug("Dropped %d query parameter(s) from %s", removed, parts.host)
            changes.append(REMOVED_TRACKING)

    async def _https_available(self, parts: _Parts) -> bool:
        port = None if parts.port == DEFAULT_PORTS["http"] else parts.port
        target = replace(parts, scheme="https", port=port, fragment="").geturl()
        try:
            return bool(await asyncio.wait_for(self.probe(target), timeout=self.probe_timeout))
        except asyncio.TimeoutError:
            logger.debug("HTTPS probe timed out for %s", target)
            return False
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.debug("HTTPS probe cancelled for %s", target)
            return False
        except Exception as e:
            logger.debug("HTTPS probe error for %s: %s", target, e)
            return False


async def clean_url(url: str, options: CleaningOptions | None = None) -> CleaningResult:
    """Clean ``url`` with the default probe and tracking classifier."""
    return await UrlCleaner().clean(url, options)
