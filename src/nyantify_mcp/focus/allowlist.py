"""Identifiers of editors and IDEs whose focus suppresses notifications."""

from __future__ import annotations

from typing import Iterable

from .probe import platform_family

# macOS reports bundle identifiers; other platforms report process names.
DEFAULT_IDE_IDENTIFIERS: dict[str, tuple[str, ...]] = {
    "darwin": (
        "com.microsoft.VSCode",
        "com.microsoft.VSCodeInsiders",
        "com.todesktop.230313mzl4w4u92",  # Cursor
        "com.todesktop.20230321yt3tgw5",  # Cursor, older builds
        "com.jetbrains.intellij",
        "com.jetbrains.intellij.ce",
        "com.jetbrains.WebStorm",
        "com.jetbrains.PhpStorm",
        "com.jetbrains.rubymine",
        "com.jetbrains.RubyMine",
        "com.jetbrains.pycharm",
        "com.jetbrains.pycharm.ce",
        "com.jetbrains.PyCharm",
        "com.jetbrains.goland",
        "com.jetbrains.GoLand",
        "com.jetbrains.CLion",
        "com.apple.dt.Xcode",
        "com.sublimetext.4",
        "com.github.atom",
        "dev.zed.Zed",
    ),
    "linux": (
        "code",
        "code-insiders",
        "cursor",
        "idea",
        "pycharm",
        "webstorm",
        "phpstorm",
        "goland",
        "clion",
        "rubymine",
        "sublime_text",
        "zed",
        "zed-editor",
    ),
    "win32": (
        "Code",
        "Code - Insiders",
        "Cursor",
        "idea64",
        "pycharm64",
        "webstorm64",
        "phpstorm64",
        "goland64",
        "clion64",
        "rubymine64",
        "sublime_text",
        "devenv",
        "Zed",
    ),
}


def default_allow_list(platform: str | None = None) -> frozenset[str]:
    return frozenset(DEFAULT_IDE_IDENTIFIERS.get(platform_family(platform), ()))


def resolve_allow_list(
    override: Iterable[str] | None = None,
    *,
    platform: str | None = None,
) -> frozenset[str]:
    """Return the operator override when it is non-empty, else the platform defaults."""

    identifiers = frozenset(item.strip() for item in (override or ()) if item.strip())
    return identifiers or default_allow_list(platform)


__all__ = ["DEFAULT_IDE_IDENTIFIERS", "default_allow_list", "resolve_allow_list"]
