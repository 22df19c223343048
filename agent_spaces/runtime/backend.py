"""PTY backends for running interactive shells."""

from __future__ import annotations

import os
import subprocess
from typing import Callable, Optional, Protocol, Sequence

from loguru import logger


class PTYBackend(Protocol):
    """Minimal PTY backend contract."""

    def read(self) -> str:
        """Read a stdout/stderr chunk ("" when nothing arrived)."""

    def write(self, data: str) -> None:
        """Write input data."""

    def resize(self, cols: int, rows: int) -> None:
        """Apply terminal resize."""

    def is_alive(self) -> bool:
        """True while the child process has not exited."""

    def close(self) -> None:
        """Close process resources."""


BackendFactory = Callable[..., PTYBackend]


def _terminal_env() -> dict[str, str]:
    env = dict(os.environ)
    env.setdefault("TERM", "xterm-256color")
    env.setdefault("COLORTERM", "truecolor")
    return env


class UnixPexpectBackend:
    """PTY backend for Unix-like systems via pexpect."""

    def __init__(
        self,
        executable: str,
        args: Sequence[str] = (),
        cols: int = 80,
        rows: int = 24,
        cwd: str | None = None,
    ) -> None:
        import pexpect

        self._pexpect = pexpect
        self._proc = pexpect.spawn(
            executable,
            args=list(args),
            encoding="utf-8",
            codec_errors="ignore",
            echo=True,
            dimensions=(rows, cols),
            cwd=cwd,
            env=_terminal_env(),
        )

    def read(self) -> str:
        try:
            return self._proc.read_nonblocking(size=4096, timeout=0.1)
        except self._pexpect.TIMEOUT:
            return ""
        except self._pexpect.EOF:
            return ""

    def write(self, data: str) -> None:
        self._proc.send(data)

    def resize(self, cols: int, rows: int) -> None:
        self._proc.setwinsize(rows, cols)

    def is_alive(self) -> bool:
        return self._proc.isalive()

    def close(self) -> None:
        if self._proc.isalive():
            self._proc.close(force=True)


class WinptyBackend:
    """PTY backend for Windows via pywinpty."""

    def __init__(
        self,
        executable: str,
        args: Sequence[str] = (),
        cols: int = 80,
        rows: int = 24,
        cwd: str | None = None,
    ) -> None:
        from winpty import Backend, PtyProcess

        argv = [executable, *args]
        launch_attempts = (
            {"backend": Backend.ConPTY},
            {"backend": Backend.WinPTY},
            {},
        )

        self._proc = None
        last_error: Optional[Exception] = None
        for extra in launch_attempts:
            try:
                self._proc = PtyProcess.spawn(
                    argv,
                    dimensions=(rows, cols),
                    env=_terminal_env(),
                    cwd=cwd,
                    **extra,
                )
                break
            except Exception as exc:  # pragma: no cover - platform specific
                last_error = exc

        if self._proc is None:
            raise RuntimeError("Failed to start PTY backend") from last_error

    def read(self) -> str:
        try:
            return self._proc.read(4096)
        except EOFError:
            return ""

    def write(self, data: str) -> None:
        self._proc.write(data)

    def resize(self, cols: int, rows: int) -> None:
        self._proc.setwinsize(rows, cols)

    def is_alive(self) -> bool:
        return self._proc.isalive()

    def close(self) -> None:
        pid: int | None = getattr(self._proc, "pid", None)
        try:
            self._proc.close()
        except OSError as exc:
            logger.debug(f"[pty] winpty close failed: {exc}")
        # Kill the whole process tree so agent CLIs started from the shell don't linger.
        if pid is not None:
            _taskkill(pid)


class SubprocessFallbackBackend:
    """Fallback backend when no PTY is available."""

    def __init__(
        self,
        executable: str,
        args: Sequence[str] = (),
        cols: int = 80,
        rows: int = 24,
        cwd: str | None = None,
    ) -> None:
        del cols, rows
        self._proc = subprocess.Popen(
            [executable, *args],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="ignore",
            bufsize=1,
            cwd=cwd,
            env=_terminal_env(),
        )

    def read(self) -> str:
        if not self._proc.stdout:
            return ""
        chunk = self._proc.stdout.read(1)
        return chunk or ""

    def write(self, data: str) -> None:
        if self._proc.stdin:
            self._proc.stdin.write(data)
            self._proc.stdin.flush()

    def resize(self, cols: int, rows: int) -> None:
        del cols, rows

    def is_alive(self) -> bool:
        return self._proc.poll() is None

    def close(self) -> None:
        if self._proc.poll() is None:
            self._proc.terminate()
        if os.name == "nt" and self._proc.pid is not None:
            _taskkill(self._proc.pid)


def _taskkill(pid: int) -> None:
    try:
        subprocess.run(
            ["taskkill", "/F", "/T", "/PID", str(pid)],
            capture_output=True,
            timeout=3,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug(f"[pty] taskkill {pid} failed: {exc}")


def build_backend(
    executable: str,
    args: Sequence[str] = (),
    cols: int = 80,
    rows: int = 24,
    cwd: str | None = None,
) -> PTYBackend:
    """Build the best available backend for the current platform."""
    if os.name == "nt":
        try:
            backend = WinptyBackend(executable, args, cols=cols, rows=rows, cwd=cwd)
            logger.info(f"[pty] Using WinptyBackend for: {executable}")
            return backend
        except Exception as exc:
            logger.warning(f"[pty] WinptyBackend failed ({exc}), falling back to SubprocessFallbackBackend")
            return SubprocessFallbackBackend(executable, args, cols=cols, rows=rows, cwd=cwd)
    backend = UnixPexpectBackend(executable, args, cols=cols, rows=rows, cwd=cwd)
    logger.info(f"[pty] Using UnixPexpectBackend for: {executable} {' '.join(args)}".rstrip())
    return backend
