# src/ngspice_core/simulation/execution.py
"""
Provides `simulate`, the public entry point for running ngspice.

This module is a thin Facade over the engine layer. It hides the engine singleton,
the exclusive guard and the three components that talk to ngspice (`CircuitLoader`,
`CommandExecutor`, `ResultExtractor`), and sequences them in the only order ngspice
supports:

1.  Validate both inputs without touching shared state.
2.  Acquire the engine guard (blocking while another thread is simulating).
3.  Truncate the diagnostic buffers.
4.  Load the circuit, run the command, copy out every vector.
5.  Move the captured stdout/stderr into the result, leaving the buffers empty.
6.  Release the guard and return the owned `SimulationRecord`.

Calls are totally ordered by guard acquisition, so no record ever contains output
from another call.
"""
import logging
from typing import Optional

from ..engine.singleton import EngineSingleton, shared_engine
from .executor import CommandExecutor
from .extractor import ResultExtractor
from .loader import CircuitLoader
from .results import SimulationRecord
from .validation import check_circuit, check_command

logger = logging.getLogger(__name__)


def simulate(
    circuit: str,
    command: str,
    engine: Optional[EngineSingleton] = None
) -> SimulationRecord:
    """
    Parses a new circuit and executes a simulation command, returning the complete results.

    Blocks until the simulation completes. Safe to call from any thread, but only one
    simulation executes at a time.

    Args:
        circuit: An ngspice circuit listing. Must be self-contained (no `.include`).
        command: An ngspice simulation command such as `op`, `ac dec 10 1 1meg` or
                 `tran 1u 1m`.
        engine: Optional engine to run on. Defaults to the process-wide shared engine;
                tests inject an `EngineSingleton` backed by a substitute library.

    Returns:
        A `SimulationRecord` with the captured logs and every output vector.

    Raises:
        InvalidStringEncodingError: If either argument contains a NUL character.
        UnsafeDirectiveError: If either argument would quit ngspice or start a
                              background analysis (when that check is enabled).
        InvalidCircuitError: If ngspice cannot parse the circuit.
        UnknownEngineError: If ngspice cannot execute the command.
        LibraryLoadError: If the ngspice shared library cannot be loaded on first use.
        EngineFault: If ngspice fails unrecoverably. Not an `Exception` subclass.
    """
    engine = engine if engine is not None else shared_engine()

    reject_unsafe = engine.get_config().reject_unsafe_directives
    check_circuit(circuit, reject_unsafe_directives=reject_unsafe)
    check_command(command, reject_unsafe_directives=reject_unsafe)

    with engine.acquire() as guard:
        guard.handle.reset_buffers()
        CircuitLoader(guard).load(circuit)
        CommandExecutor(guard).execute(command)
        vectors = ResultExtractor(guard).extract()
        stdout, stderr = guard.handle.take_buffers()

    logger.info(f"Simulation '{command}' complete: {len(vectors)} vectors.")
    return SimulationRecord(stdout=stdout, stderr=stderr, vectors=vectors)
