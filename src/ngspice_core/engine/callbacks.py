# src/ngspice_core/engine/callbacks.py
"""
The two ctypes callbacks registered with ngspice at initialization.

Rules for everything in this module:
- ngspice calls these functions synchronously, from inside `ngSpice_Circ` and
  `ngSpice_Command`, on the thread that holds the engine guard.
- Python exceptions cannot propagate through the C caller; ctypes would print and
  discard them. Faults are recorded on the `EngineHandle` instead, and the component
  that made the foreign call raises them once the call returns.
- The destination handle is recovered from the opaque `userdata` pointer alone.
  `_handle_from_context` is the only place that trusts a raw address.
"""
import ctypes
import logging
import os

from ..config import FATAL_POLICY_ABORT
from .bindings import ControlledExit, SendChar
from .handle import EngineHandle

logger = logging.getLogger(__name__)

STDOUT_TAG = "stdout "
STDERR_TAG = "stderr "


def handle_context(handle: EngineHandle) -> int:
    """Returns the opaque token passed to ngspice as `userdata` for `handle`."""
    return id(handle)


def _handle_from_context(context: int) -> EngineHandle:
    # Unchecked: `context` must be the value produced by handle_context() for a handle
    # that is still referenced. EngineSingleton keeps its handle alive forever.
    return ctypes.cast(context, ctypes.py_object).value


def route_line(handle: EngineHandle, line: str):
    """Appends one engine output line to the buffer selected by its stream tag."""
    if line.startswith(STDERR_TAG):
        handle.write_stderr(line[len(STDERR_TAG):])
    elif line.startswith(STDOUT_TAG):
        handle.write_stdout(line[len(STDOUT_TAG):])
    else:
        handle.write_stdout(line)


def _send_char(message: bytes, ident: int, context: int) -> int:
    handle = _handle_from_context(context)
    try:
        line = (message or b"").decode("utf-8")
    except UnicodeDecodeError as e:
        logger.critical(f"ngspice sent non-UTF-8 output: {message!r}")
        handle.record_contract_violation(f"non-UTF8 output from ngSPICE: {e}")
        return 0
    logger.debug(f"ngspice: {line}")
    route_line(handle, line)
    return 0


def _controlled_exit(status: int, immediate: bool, quit_upon_exit: bool, ident: int, context: int) -> int:
    handle = _handle_from_context(context)
    handle.mark_aborted(status)
    logger.critical(
        f"ngspice called its fatal-exit hook (status={status}, immediate={immediate}, "
        f"quit={quit_upon_exit}); the engine cannot be used again in this process."
    )
    if handle.fatal_policy == FATAL_POLICY_ABORT:
        logging.shutdown()
        os.abort()
    return status


# Module-level ctypes function pointers. They must outlive every registration, so they
# are created once and never rebound.
SEND_CHAR_CALLBACK = SendChar(_send_char)
CONTROLLED_EXIT_CALLBACK = ControlledExit(_controlled_exit)
