from __future__ import annotations

from pydantic import BaseModel

# Change-log vocabulary
UPGRADED_TO_HTTPS = "Upgraded to HTTPS"
REMOVED_WWW = "Removed www prefix"
REMOVED_DEFAULT_PORT = "Removed default port"
REMOVED_TRACKING = "Removed tracking parameters"
REMOVED_FRAGMENT = "Removed URL fragment"
NORMALIZED_PATH = "Normalized path"


class CleaningOptions(BaseModel):
    """Toggles for each cleaning rule. Rules always run in a fixed order."""
    model_config = {"frozen": True}

    try_https: bool = False  # network probe, opt-in for library callers
    remove_www: bool = True
    remove_trailing_slash: bool = True
    remove_fragment: bool = True
    remove_tracking: bool = True
    sort_params: bool = True
    remove_empty_params: bool = True
    remove_default_ports: bool = True


class CleaningResult(BaseModel):
    original: str  # re-serialized parsed input, not the literal argument
    cleaned: str
    changes: list[str] = []

    @property
    def changed(self) -> bool:
        return self.cleaned != self.original
