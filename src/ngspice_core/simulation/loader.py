# src/ngspice_core/simulation/loader.py
"""
Submits a validated circuit listing to the locked engine.
"""
import ctypes
import logging

from ..engine.singleton import EngineGuard
from .exceptions import InvalidCircuitError
from .validation import split_circuit_lines

logger = logging.getLogger(__name__)


def marshal_circuit(circuit: str):
    """
    Converts a circuit listing to the NULL-terminated array of NUL-terminated lines
    expected by `ngSpice_Circ`.

    The returned ctypes array owns the encoded lines and must stay referenced until
    the foreign call returns.
    """
    lines = [line.encode("utf-8") for line in split_circuit_lines(circuit)]
    return (ctypes.c_char_p * (len(lines) + 1))(*lines, None)


class CircuitLoader:
    """Loads circuits into ngspice. Callers must hold the engine guard."""

    def __init__(self, guard: EngineGuard):
        self.guard = guard

    def load(self, circuit: str):
        """
        Loads `circuit` as ngspice's current circuit.

        Input must already have passed `check_circuit`.

        Raises:
            InvalidCircuitError: If ngspice rejects the circuit.
        """
        lines = marshal_circuit(circuit)
        logger.debug(f"Loading circuit ({len(lines) - 1} lines) into ngspice.")
        status = self.guard.library.circ(lines)
        self.guard.handle.raise_pending_faults()
        if status != 0:
            diagnostics = self.guard.handle.stderr_text()
            logger.error(f"ngspice rejected the circuit (status {status}).")
            raise InvalidCircuitError(diagnostics=diagnostics)
        logger.debug("Circuit loaded.")
