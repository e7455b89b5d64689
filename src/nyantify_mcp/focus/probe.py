"""Async probes reporting which application currently has input focus."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil
import sys
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class FocusProbeUnavailableError(RuntimeError):
    """Raised when the command backing a focus probe cannot be located."""


class FocusProbe(Protocol):
    """Protocol for foreground-application queries.

    Implementations return ``None`` when the answer is unknown.
    """

    async def current_foreground_id(self) -> str | None:
        ...

    async def current_foreground_name(self) -> str | None:
        ...


class SubprocessFocusProbe:
    """Base class for probes that shell out to a platform utility."""

    command_name: str = ""
    # True when the foreground name is the same value as the foreground id.
    name_matches_id: bool = False

    def __init__(self, executable: Path | None = None, *, timeout: float = 2.0) -> None:
        self._executable_path = self._resolve_executable(executable)
        self._timeout = timeout

    @classmethod
    def _resolve_executable(cls, explicit: Path | None) -> Path:
        if explicit is not None:
            candidate = Path(explicit)
            if candidate.exists() and candidate.is_file():
                return candidate
            raise FocusProbeUnavailableError(f"{cls.command_name} not found at {candidate}")

        binary = shutil.which(cls.command_name)
        if binary is None:
            raise FocusProbeUnavailableError(f"{cls.command_name} executable not found on PATH")
        return Path(binary)

    @property
    def executable(self) -> Path:
        return self._executable_path

    async def _invoke(self, *args: str) -> str | None:
        """Run the probe command and return stripped stdout, or ``None`` on any failure."""

        cmd = [str(self._executable_path), *args]
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("Focus probe could not start", extra={"command": cmd[0], "error": str(exc)})
            return None

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            logger.warning(
                "Focus probe timed out",
                extra={"command": cmd[0], "timeout": self._timeout},
            )
            return None

        if process.returncode != 0:
            logger.warning(
                "Focus probe failed",
                extra={
                    "command": cmd[0],
                    "returncode": process.returncode,
                    "stderr": stderr_bytes.decode("utf-8", errors="replace").strip()[:200],
                },
            )
            return None

        output = stdout_bytes.decode("utf-8", errors="replace").strip()
        return output or None


_FRONTMOST_BUNDLE_ID = (
    'tell application "System Events" to get bundle identifier of '
    "first application process whose frontmost is true"
)
_FRONTMOST_NAME = (
    'tell application "System Events" to get name of '
    "first application process whose frontmost is true"
)


class AppleScriptFocusProbe(SubprocessFocusProbe):
    """macOS probe reporting the bundle identifier of the frontmost process."""

    command_name = "osascript"

    async def current_foreground_id(self) -> str | None:
        return await self._invoke("-e", _FRONTMOST_BUNDLE_ID)

    async def current_foreground_name(self) -> str | None:
        return await self._invoke("-e", _FRONTMOST_NAME)


class XdotoolFocusProbe(SubprocessFocusProbe):
    """X11 probe reporting the process name owning the active window."""

    command_name = "xdotool"
    name_matches_id = True

    def __init__(
        self,
        executable: Path | None = None,
        *,
        timeout: float = 2.0,
        proc_root: Path = Path("/proc"),
    ) -> None:
        super().__init__(executable, timeout=timeout)
        self._proc_root = Path(proc_root)

    async def current_foreground_id(self) -> str | None:
        pid = await self._invoke("getactivewindow", "getwindowpid")
        if pid is None or not pid.isdigit():
            return None
        try:
            comm = (self._proc_root / pid / "comm").read_text(encoding="utf-8").strip()
        except OSError as exc:
            logger.warning("Could not read process name", extra={"pid": pid, "error": str(exc)})
            return None
        return comm or None

    async def current_foreground_name(self) -> str | None:
        return await self.current_foreground_id()


_POWERSHELL_FOREGROUND = r"""
Add-Type @"
using System;
using System.Runtime.InteropServices;
public static class NyantifyFocus {
  [DllImport("user32.dll")] public static extern IntPtr GetForegroundWindow();
  [DllImport("user32.dll")] public static extern uint GetWindowThreadProcessId(IntPtr hWnd, out uint processId);
}
"@
$focusPid = 0
[void][NyantifyFocus]::GetWindowThreadProcessId([NyantifyFocus]::GetForegroundWindow(), [ref]$focusPid)
(Get-Process -Id $focusPid).ProcessName
"""


class PowerShellFocusProbe(SubprocessFocusProbe):
    """Windows probe reporting the process name owning the foreground window."""

    command_name = "powershell"
    name_matches_id = True

    async def current_foreground_id(self) -> str | None:
        return await self._invoke("-NoProfile", "-NonInteractive", "-Command", _POWERSHELL_FOREGROUND)

    async def current_foreground_name(self) -> str | None:
        return await self.current_foreground_id()


class NullFocusProbe:
    """Probe used when focus detection is unavailable; always reports unknown."""

    async def current_foreground_id(self) -> str | None:
        return None

    async def current_foreground_name(self) -> str | None:
        return None


class FakeFocusProbe:
    """Test double returning canned answers."""

    def __init__(
        self,
        foreground_id: str | None = None,
        foreground_name: str | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.foreground_id = foreground_id
        self.foreground_name = foreground_name
        self._error = error
        self.calls = 0

    async def current_foreground_id(self) -> str | None:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self.foreground_id

    async def current_foreground_name(self) -> str | None:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self.foreground_name


_PROBES_BY_PLATFORM: dict[str, type[SubprocessFocusProbe]] = {
    "darwin": AppleScriptFocusProbe,
    "linux": XdotoolFocusProbe,
    "win32": PowerShellFocusProbe,
}


def platform_family(platform: str | None = None) -> str:
    platform = platform or sys.platform
    if platform.startswith("linux"):
        return "linux"
    if platform in {"win32", "cygwin"}:
        return "win32"
    return platform


def create_focus_probe(platform: str | None = None, *, timeout: float = 2.0) -> FocusProbe:
    """Return the focus probe for ``platform``, or a null probe if none can run."""

    family = platform_family(platform)
    probe_cls = _PROBES_BY_PLATFORM.get(family)
    if probe_cls is None:
        logger.warning(
            "No focus probe for platform; notifications will not be suppressed",
            extra={"platform": family},
        )
        return NullFocusProbe()
    try:
        return probe_cls(timeout=timeout)
    except FocusProbeUnavailableError as exc:
        logger.warning(
            "Focus probe unavailable; notifications will not be suppressed",
            extra={"platform": family, "error": str(exc)},
        )
        return NullFocusProbe()


__all__ = [
    "AppleScriptFocusProbe",
    "FakeFocusProbe",
    "FocusProbe",
    "FocusProbeUnavailableError",
    "NullFocusProbe",
    "PowerShellFocusProbe",
    "SubprocessFocusProbe",
    "XdotoolFocusProbe",
    "create_focus_probe",
    "platform_family",
]
