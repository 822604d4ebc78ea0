"""
ADB Wrapper Module
Runs the debug-bridge (adb) and bootloader (fastboot) tools as external
commands and classifies every outcome instead of raising.
"""

import logging
import os
import signal
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .adb_models import CommandResult, CommandStatus
from .config import COMMAND_TIMEOUT, Settings

logger = logging.getLogger(__name__)

# Seconds to collect output after the process group has been killed
DRAIN_TIMEOUT = 2


def _spawn_kwargs() -> dict:
    """
    Platform-specific Popen arguments.

    Windows: keep a console window from flashing up for every call.
    POSIX: run the tool in its own session so a timeout can kill every
    process it started, not only the direct child.
    """
    if os.name == 'nt':
        si = subprocess.STARTUPINFO()
        si.dwFlags |= subprocess.STARTF_USESHOWWINDOW
        return {'startupinfo': si, 'creationflags': subprocess.CREATE_NO_WINDOW}
    return {'start_new_session': True}


def _kill(proc: subprocess.Popen) -> None:
    """Kill the process and, on POSIX, its whole process group."""
    if os.name == 'nt':
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_command(binary: str, args: Sequence[str], timeout: float = COMMAND_TIMEOUT) -> CommandResult:
    """
    Execute an external binary with stdout and stderr merged.

    Args:
        binary: Executable path or bare command name.
        args: Argument vector (without the binary).
        timeout: Wall-clock limit in seconds. The process is killed when
            it is exceeded.

    Returns:
        CommandResult classified as SUCCESS, NON_ZERO_EXIT, TIMEOUT or
        SPAWN_FAILURE. Never raises for tool failures.
    """
    cmd = (binary, *args)
    logger.debug("Running: %s", " ".join(cmd))

    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding='utf-8',
            errors='replace',
            **_spawn_kwargs()
        )
    except OSError as e:
        logger.warning("Could not start %s: %s", binary, e)
        return CommandResult(CommandStatus.SPAWN_FAILURE, str(e), None, cmd)

    try:
        output, _ = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill(proc)
        try:
            output, _ = proc.communicate(timeout=DRAIN_TIMEOUT)
        except subprocess.TimeoutExpired:
            # A detached descendant still holds the pipe
            output = ""
            proc.stdout.close()
            proc.wait()
        logger.warning("Command timed out after %ss: %s", timeout, " ".join(cmd))
        return CommandResult(CommandStatus.TIMEOUT, output or "", None, cmd)
    finally:
        # Interrupts (e.g. KeyboardInterrupt) must not leave the child behind
        if proc.poll() is None:
            _kill(proc)
            proc.wait()

    if proc.returncode != 0:
        logger.debug("Exit code %d from: %s", proc.returncode, " ".join(cmd))
        return CommandResult(CommandStatus.NON_ZERO_EXIT, output or "", proc.returncode, cmd)

    return CommandResult(CommandStatus.SUCCESS, output or "", 0, cmd)


def executable_name(tool: str) -> str:
    """Platform-specific file name of a platform-tools binary."""
    return f"{tool}.exe" if os.name == 'nt' else tool


def resolve_tool_path(tool: str, resources_dir: Optional[Path] = None, override: Optional[str] = None) -> str:
    """
    Locate a platform-tools binary.

    Order: explicit override, then ``<resources_dir>/platform-tools/<exe>``
    if it exists, then the bare command name for a PATH lookup.
    """
    if override:
        return override

    if resources_dir is not None:
        bundled = Path(resources_dir) / "platform-tools" / executable_name(tool)
        if bundled.is_file():
            return str(bundled.resolve())

    return tool


class AdbClient:
    """
    Thin command layer over the adb and fastboot binaries.

    Every method returns a CommandResult; callers decide what a failure
    means for them.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.adb_path = resolve_tool_path("adb", self.settings.resources_dir, self.settings.adb_path)
        self.fastboot_path = resolve_tool_path("fastboot", self.settings.resources_dir, self.settings.fastboot_path)
        self.timeout = self.settings.command_timeout

    def _run(self, binary: str, args: Sequence[str]) -> CommandResult:
        return run_command(binary, args, self.timeout)

    def adb(self, *args: str, serial: Optional[str] = None) -> CommandResult:
        """Run an adb command, optionally targeted at one device."""
        cmd = []
        if serial:
            cmd.extend(["-s", serial])
        cmd.extend(args)
        return self._run(self.adb_path, cmd)

    def fastboot(self, *args: str, serial: Optional[str] = None) -> CommandResult:
        """Run a fastboot command, optionally targeted at one device."""
        cmd = []
        if serial:
            cmd.extend(["-s", serial])
        cmd.extend(args)
        return self._run(self.fastboot_path, cmd)

    def shell(self, serial: str, *args: str) -> CommandResult:
        """Run a shell command on the device."""
        return self.adb("shell", *args, serial=serial)

    def getprop(self, serial: str, prop: str) -> CommandResult:
        """Read a single system property."""
        return self.shell(serial, "getprop", prop)


def check_adb_available(client: AdbClient) -> bool:
    """Check if the adb binary can be started."""
    return client.adb("version").ok


def check_fastboot_available(client: AdbClient) -> bool:
    """Check if the fastboot binary can be started."""
    return client.fastboot("--version").ok
