# src/ngspice_core/errors.py
import logging
from typing import Any, Dict, Protocol, abstractmethod
from typing import runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class NgspiceCoreError(Exception):
    """Base class for all custom, user-facing errors in ngspice-core."""
    pass

class SimulationError(NgspiceCoreError):
    """
    Base class for the ordinary, recoverable failures of a single `simulate` call:
    rejected input, a circuit the engine could not parse, or a command the engine refused.
    The engine remains usable after any of these.
    """
    pass

class LibraryLoadError(NgspiceCoreError):
    """Raised when the ngspice shared library cannot be located, loaded or initialized."""
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """
    A protocol for exceptions that can generate their own rich diagnostic report.
    """
    def get_diagnostic_report(self) -> str:
        """Generates a complete, user-friendly, multi-line report string."""
        ...

class DiagnosableError(SimulationError, Diagnosable):
    """
    A common, concrete base class for all recoverable simulation errors that carry
    a diagnostic report.

    It is catchable both as `SimulationError` and as `DiagnosableError`, and declares
    `get_diagnostic_report` abstract so that every subclass must say how it is reported.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        """
        Abstract method to generate the diagnostic report.
        Subclasses MUST implement this.
        """
        raise NotImplementedError


# --- Stateless Formatting Utility ---

def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    A stateless helper to format the final multi-line report string, ensuring a
    consistent look and feel for all user-facing diagnostics.

    Args:
        error_type: The high-level category of the error (e.g., "Invalid Circuit").
        details: A detailed, potentially multi-line description of the problem.
        suggestion: Actionable advice for the user to resolve the issue.
        context: A dictionary of contextual information (argument name, command, etc.).

    Returns:
        A formatted, user-friendly diagnostic report string ready for display.
    """
    lines = [
        "\n",
        "================ ngspice-core: Actionable Diagnostic Report ================",
        f"Error Type:     {error_type}",
    ]
    if argument := context.get('argument'):
        lines.append(f"Argument:       {argument}")
    if command := context.get('command'):
        lines.append(f"Command:        '{command}'")
    if position := context.get('position'):
        lines.append(f"Position:       {position}")

    lines.append("\nDetails:")
    for line in details.splitlines() or ["(no output captured from ngspice)"]:
        lines.append(f"  {line}")

    if suggestion:
        lines.append("\nSuggestion:")
        for line in suggestion.splitlines():
            lines.append(f"  {line}")

    lines.append("============================================================================")
    return "\n".join(lines)
