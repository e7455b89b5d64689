"""Foreground application detection."""

from .allowlist import DEFAULT_IDE_IDENTIFIERS, default_allow_list, resolve_allow_list
from .probe import (
    AppleScriptFocusProbe,
    FakeFocusProbe,
    FocusProbe,
    FocusProbeUnavailableError,
    NullFocusProbe,
    PowerShellFocusProbe,
    XdotoolFocusProbe,
    create_focus_probe,
    platform_family,
)

__all__ = [
    "AppleScriptFocusProbe",
    "DEFAULT_IDE_IDENTIFIERS",
    "FakeFocusProbe",
    "FocusProbe",
    "FocusProbeUnavailableError",
    "NullFocusProbe",
    "PowerShellFocusProbe",
    "XdotoolFocusProbe",
    "create_focus_probe",
    "default_allow_list",
    "platform_family",
    "resolve_allow_list",
]
