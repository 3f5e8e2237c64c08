"""Core configuration, errors and factory components."""

from draftgen.core.config import Settings, get_settings
from draftgen.core.exceptions import DraftServiceError

__all__ = [
    "Settings",
    "get_settings",
    "DraftServiceError",
]
