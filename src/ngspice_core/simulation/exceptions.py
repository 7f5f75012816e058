# src/ngspice_core/simulation/exceptions.py
"""
Defines custom, diagnosable exceptions for the ordinary failures of a `simulate` call.

Every exception in this module inherits from `DiagnosableError` and therefore from
`SimulationError`:
1.  **Catchability:** Each is a concrete class that can be caught explicitly
    (e.g., `except InvalidCircuitError:`), or all together as `SimulationError`.
2.  **Contract Enforcement:** Each implements `get_diagnostic_report()`.
3.  **Recoverability:** None of them leaves the engine unusable. The exclusive engine
    guard is released before they reach the caller.

Input-side errors (`InvalidStringEncodingError`, `UnsafeDirectiveError`) are raised
before the engine is touched. Engine-side errors carry whatever ngspice wrote to its
error stream during the failed call.
"""
from dataclasses import dataclass
from typing import Optional

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class InvalidStringEncodingError(DiagnosableError):
    """
    Raised when a circuit or command contains an embedded NUL character, which cannot
    be passed to ngspice as a C string.
    """
    argument: str
    position: int

    def __str__(self):
        return (
            f"invalid string encoding in {self.argument}: embedded NUL character at index "
            f"{self.position}; all strings must be UTF-8 with no null bytes"
        )

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Invalid String Encoding",
            details=str(self),
            suggestion="Remove the NUL ('\\x00') character from the input text.",
            context={'argument': self.argument, 'position': str(self.position)}
        )


@dataclass()
class UnsafeDirectiveError(DiagnosableError):
    """
    Raised when a circuit or command contains a directive that would quit ngspice or
    start a background analysis thread, either of which would leave the shared engine
    outside the control of the exclusive lock.
    """
    argument: str
    directive: str

    def __str__(self):
        return f"directive '{self.directive}' in {self.argument} is not allowed"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Unsafe Directive",
            details=(
                f"The {self.argument} contains the directive '{self.directive}'.\n"
                "Quitting ngspice or running analyses in a background thread is not supported, "
                "because the engine is shared by the whole process."
            ),
            suggestion="Use the foreground form of the analysis (e.g. 'tran' instead of 'bg_tran').",
            context={'argument': self.argument, 'command': self.directive}
        )


@dataclass()
class InvalidCircuitError(DiagnosableError):
    """Raised when ngspice rejects a circuit. `diagnostics` holds ngspice's error log."""
    diagnostics: str

    def __str__(self):
        return f"error parsing circuit; ngSPICE logs follow:\n{self.diagnostics}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Invalid Circuit",
            details=self.diagnostics,
            suggestion=(
                "Check the netlist syntax reported above. The circuit must be self-contained "
                "(no '.include') and end with an '.end' line."
            ),
            context={'argument': 'circuit'}
        )


@dataclass()
class UnknownEngineError(DiagnosableError):
    """
    Raised when ngspice refuses a simulation command. `diagnostics` holds ngspice's
    error log.
    """
    diagnostics: str
    command: Optional[str] = None

    def __str__(self):
        return f"unknown error; ngSPICE logs follow:\n{self.diagnostics}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Simulation Command Failed",
            details=self.diagnostics,
            suggestion="Check that the command is a valid ngspice analysis such as 'op', 'ac' or 'tran'.",
            context={'argument': 'command', 'command': self.command}
        )
