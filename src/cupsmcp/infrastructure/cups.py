"""CUPS command-line client.

Wraps ``lpr``, ``lpstat``, ``lpadmin`` and ``lpoptions``. Every call goes
through one runner so tests can substitute it; a missing binary or a
non-zero exit becomes :class:`CupsCommandError` with the tool's own message.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from cupsmcp.config.models import DEFAULT_CUPS_PORT, CupsConfig
from cupsmcp.domain.options import PrintOptions

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess[str]]

_DEFAULT_DEST_PREFIX = "system default destination:"


class CupsCommandError(Exception):
    """A CUPS command could not be run or exited non-zero."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"{command} failed: {message}")
        self.command = command
        self.message = message


class CupsClient:
    """Thin adapter over the CUPS CLI tools, optionally aimed at a remote server."""

    def __init__(self, config: CupsConfig | None = None, *, runner: Runner | None = None) -> None:
        self._config = config or CupsConfig()
        self._runner: Runner = runner or subprocess.run

    # ------------------------------------------------------------------
    # Server addressing
    # ------------------------------------------------------------------

    @property
    def server_address(self) -> str:
        """``host`` or ``host:port``; empty when talking to the local scheduler."""
        if not self._config.server:
            return ""
        if self._config.port != DEFAULT_CUPS_PORT:
            return f"{self._config.server}:{self._config.port}"
        return self._config.server

    @property
    def display(self) -> str:
        return self.server_address or "localhost"

    def server_args(self) -> list[str]:
        address = self.server_address
        return ["-h", address] if address else []

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _run(self, args: Sequence[str]) -> str:
        command = args[0]
        logger.debug("Running %s", " ".join(args))
        try:
            proc = self._runner(list(args), capture_output=True, text=True, check=False)
        except FileNotFoundError as exc:
            raise CupsCommandError(command, f"{command} not found; is CUPS installed?") from exc
        except OSError as exc:
            raise CupsCommandError(command, str(exc)) from exc
        if proc.returncode != 0:
            message = (proc.stderr or proc.stdout or "").strip() or f"exit status {proc.returncode}"
            raise CupsCommandError(command, message)
        return (proc.stdout or "").strip()

    def list_printers(self) -> str:
        """Free-text printer and default-destination status from ``lpstat -p -d``."""
        return self._run(["lpstat", *self.server_args(), "-p", "-d"])

    def default_destination(self) -> str | None:
        """The scheduler's default printer, or None if unset or unreachable."""
        try:
            output = self._run(["lpstat", *self.server_args(), "-d"])
        except CupsCommandError:
            logger.debug("Could not query default destination", exc_info=True)
            return None
        for line in output.splitlines():
            if line.lower().startswith(_DEFAULT_DEST_PREFIX):
                name = line.split(":", 1)[1].strip()
                return name or None
        return None

    def submit(
        self,
        path: Path,
        *,
        printer: str | None = None,
        copies: int = 1,
        options: PrintOptions | None = None,
    ) -> None:
        args = ["lpr", *self.server_args()]
        if printer:
            args.extend(["-P", printer])
        if copies > 1:
            args.extend(["-#", str(copies)])
        if options is not None:
            args.extend(options.to_lpr_args())
        args.append(str(path))
        self._run(args)

    def printer_uri(self, printer_name: str) -> str:
        return f"ipp://{self.server_address}/printers/{printer_name}"

    def add_printer(self, printer_name: str, local_name: str) -> str:
        """Register a remote queue locally with driverless (IPP Everywhere) setup.

        Returns the device URI used.
        """
        uri = self.printer_uri(printer_name)
        self._run(["lpadmin", "-p", local_name, "-E", "-v", uri, "-m", "everywhere"])
        return uri

    def set_default(self, printer_name: str) -> None:
        self._run(["lpoptions", "-d", printer_name])
