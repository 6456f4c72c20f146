"""Tracking-parameter classification for query string cleanup."""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable

import yaml

logger = logging.getLogger(__name__)

# Parameters that identify content even when they look like tracking noise.
# Checked first: nothing below can override them.
KEEP_PARAMS = frozenset({
    "page", "q", "search", "id", "category", "type", "sort", "filter",
})

# Known analytics / attribution parameters
REMOVE_PARAMS = frozenset({
    # UTM
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content",
    # Social / referrer
    "fbclid", "ref", "ref_src", "source", "igshid",
    # Analytics cookies passed in the URL
    "_ga", "_gl", "_tracking",
    # Ad network click IDs
    "gclid", "gclsrc", "dclid", "msclkid",
    # Affiliate
    "affiliate_id", "affiliate", "zanpid",
    # Mail platforms
    "mc_cid", "mc_eid", "_hsenc", "_hsmi", "mkt_tok",
    # Session / user
    "session_id", "user_id", "visitor_id",
    # Device / platform
    "platform", "device", "device_id",
    # Time
    "timestamp", "ts", "time",
    # Cache busting
    "cache", "nocache", "bust", "cb",
})

_TRACKING_PATTERNS = tuple(re.compile(p) for p in (
    r"^_",          # leading underscore
    r"id$",         # *id
    r"click",
    r"track",       # track, tracking
    r"ref",         # ref, refer, referr, referrer
    r"campaign",
    r"^src$",
    r"affiliate",
    r"^s_",         # Adobe Analytics
))


class TrackingClassifier:
    """Decide whether a query parameter name is tracking noise.

    ``keep`` and ``remove`` extend the built-in allow/deny lists. Lookups are
    case-insensitive and the tables are frozen at construction.
    """

    def __init__(self, *, keep: Iterable[str] = (), remove: Iterable[str] = ()):
        self.keep = KEEP_PARAMS | {k.lower() for k in keep}
        self.remove = REMOVE_PARAMS | {r.lower() for r in remove}

    def is_tracking(self, param: str) -> bool:
        name = param.lower()
        if name in self.keep:
            return False
        if name in self.remove:
            return True
        return any(p.search(name) for p in _TRACKING_PATTERNS)


default_classifier = TrackingClassifier()


def is_tracking(param: str) -> bool:
    return default_classifier.is_tracking(param)


def load_tracking_classifier(path: str) -> TrackingClassifier:
    """Build a classifier extended by the ``keep``/``remove`` lists in a YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Tracking rules not found: %s", path)
        return default_classifier

    keep = [str(k) for k in data.get("keep") or []]
    remove = [str(r) for r in data.get("remove") or []]
    logger.info("Loaded tracking rules from %s (%d keep, %d remove)", path, len(keep), len(remove))
    return TrackingClassifier(keep=keep, remove=remove)
