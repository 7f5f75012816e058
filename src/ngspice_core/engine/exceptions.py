# src/ngspice_core/engine/exceptions.py
"""
Defines the non-recoverable faults of the ngspice engine layer.

These are deliberately kept out of the ordinary `SimulationError` hierarchy. An
`EngineFault` means the engine, or this layer's assumptions about it, can no longer
be trusted: ngspice called its fatal-exit hook, produced output that breaks the
shared-library contract, or a previous caller left the exclusive section abnormally.

`EngineFault` derives from `BaseException` (like `SystemExit`), so an application's
`except Exception:` handlers do not intercept it. Once raised, the engine singleton
refuses every further acquisition.
"""


class EngineFault(BaseException):
    """Base class for all unrecoverable engine conditions."""
    pass


class EngineAbortedError(EngineFault):
    """
    Raised when ngspice invoked its controlled-exit hook. The engine is in its terminal
    `ABORTED` state and no further simulation is defined for the rest of the process.
    """
    def __init__(self, exit_status: int = 0, diagnostics: str = ""):
        self.exit_status = exit_status
        self.diagnostics = diagnostics
        message = f"ngspice signalled a fatal error (exit status {exit_status})"
        if diagnostics:
            message += f"; ngspice logs follow:\n{diagnostics}"
        super().__init__(message)


class EngineContractViolation(EngineFault):
    """
    Raised when ngspice returns data that violates the shared-library contract this
    layer is built on (non-UTF-8 text, a vector with no payload or with both payloads,
    a missing vector-info record). This indicates a mismatch between this package and
    the installed ngspice version, not a problem with the user's circuit.
    """
    pass


class EnginePoisonedError(EngineFault):
    """
    Raised on acquisition after a previous holder of the exclusive engine guard left it
    with a fault or an unexpected exception. The engine's internal state is unknown.
    """
    pass
