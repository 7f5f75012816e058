# src/ngspice_core/simulation/executor.py
"""
Runs a validated analysis command on the circuit currently loaded in the engine.
"""
import logging

from ..engine.singleton import EngineGuard
from .exceptions import UnknownEngineError

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Executes ngspice commands. Callers must hold the engine guard and have loaded a circuit."""

    def __init__(self, guard: EngineGuard):
        self.guard = guard

    def execute(self, command: str):
        """
        Runs `command` to completion. On success the results of the run become ngspice's
        current plot.

        Input must already have passed `check_command`.

        Raises:
            UnknownEngineError: If ngspice reports a non-zero status.
        """
        logger.debug(f"Executing ngspice command '{command}'.")
        status = self.guard.library.command(command.encode("utf-8"))
        self.guard.handle.raise_pending_faults()
        if status != 0:
            logger.error(f"ngspice command '{command}' failed (status {status}).")
            raise UnknownEngineError(diagnostics=self.guard.handle.stderr_text(), command=command)
