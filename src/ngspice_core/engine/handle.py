# src/ngspice_core/engine/handle.py
"""
Defines the `EngineHandle`, the only mutable state shared with ngspice.

ngspice keeps the address of the handle (passed as the opaque `userdata` pointer at
initialization) for the rest of the process and hands it back on every callback.
CPython never relocates objects, so the address stays valid for as long as the handle
is referenced; `EngineSingleton` holds that reference for the life of the process and
never replaces the handle.
"""
import io
import logging
from enum import Enum, auto
from typing import Optional, Tuple

from ..config import FATAL_POLICY_RAISE
from .exceptions import EngineAbortedError, EngineContractViolation

logger = logging.getLogger(__name__)


class EngineState(Enum):
    """Lifecycle of the process-wide engine."""
    UNINITIALIZED = auto()
    INITIALIZING = auto()
    READY = auto()
    BUSY = auto()
    ABORTED = auto()  # Terminal. Entered when ngspice calls its fatal-exit hook.


class EngineHandle:
    """
    Accumulates the text ngspice pushes during a run and records faults reported by
    callbacks, which cannot raise exceptions through the C boundary.

    Mutated only by the thread holding the engine guard (directly, or re-entrantly
    through ngspice's callbacks on that same thread).
    """

    def __init__(self, fatal_policy: str = FATAL_POLICY_RAISE):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.state = EngineState.UNINITIALIZED
        self.fatal_policy = fatal_policy
        self.exit_status: Optional[int] = None
        self.contract_violation: Optional[str] = None

    def write_stdout(self, text: str):
        self.stdout.write(text)
        self.stdout.write("\n")

    def write_stderr(self, text: str):
        self.stderr.write(text)
        self.stderr.write("\n")

    def stderr_text(self) -> str:
        return self.stderr.getvalue()

    def reset_buffers(self):
        """Truncates both diagnostic buffers at the start of a run."""
        for buffer in (self.stdout, self.stderr):
            buffer.seek(0)
            buffer.truncate(0)

    def take_buffers(self) -> Tuple[str, str]:
        """Moves the accumulated stdout/stderr text out, leaving both buffers empty."""
        captured = (self.stdout.getvalue(), self.stderr.getvalue())
        self.reset_buffers()
        return captured

    def mark_aborted(self, exit_status: int):
        self.state = EngineState.ABORTED
        self.exit_status = exit_status

    def record_contract_violation(self, message: str):
        # Keep the first violation; later ones are usually consequences of it.
        if self.contract_violation is None:
            self.contract_violation = message

    @property
    def aborted(self) -> bool:
        return self.state is EngineState.ABORTED

    def raise_pending_faults(self):
        """
        Raises any fault recorded by a callback during the foreign call that just
        returned. Called by every component immediately after it calls into ngspice.
        """
        if self.aborted:
            raise EngineAbortedError(self.exit_status or 0, self.stderr_text())
        if self.contract_violation is not None:
            raise EngineContractViolation(self.contract_violation)
