# src/ngspice_core/simulation/validation.py
"""
Input checks performed before the engine guard is taken.

These functions are pure: they touch no shared state and never call ngspice, so a
rejected input costs nothing and cannot disturb a run in progress on another thread.
"""
import logging
import re
from typing import Iterable, List, Optional

from .exceptions import InvalidStringEncodingError, UnsafeDirectiveError

logger = logging.getLogger(__name__)

# Directives that terminate ngspice or hand the analysis to a background thread.
FORBIDDEN_DIRECTIVES = frozenset({"quit", "exit"})
BACKGROUND_PREFIX = "bg_"
# ngspice runs each ';'-separated part of a control line as its own command.
COMMAND_SEPARATOR = ";"

_CONTROL_START = re.compile(r"^\s*\.control\b", re.IGNORECASE)
_CONTROL_END = re.compile(r"^\s*\.endc\b", re.IGNORECASE)


def check_encoding(text: str, argument: str):
    """Raises InvalidStringEncodingError if `text` cannot be passed as a C string."""
    position = text.find("\x00")
    if position != -1:
        raise InvalidStringEncodingError(argument=argument, position=position)


def split_circuit_lines(circuit: str) -> List[str]:
    """
    Splits a listing into cards on '\\n' only, dropping a trailing '\\r' from each.
    Other line-break characters (form feeds, U+2028, ...) stay inside their card.
    """
    lines = circuit.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _unsafe_directive(line: str) -> Optional[str]:
    for part in line.split(COMMAND_SEPARATOR):
        tokens = part.split(None, 1)
        if not tokens:
            continue
        directive = tokens[0].lower()
        if directive in FORBIDDEN_DIRECTIVES or directive.startswith(BACKGROUND_PREFIX):
            return directive
    return None


def _control_lines(circuit_lines: Iterable[str]) -> Iterable[str]:
    inside = False
    for line in circuit_lines:
        if _CONTROL_START.match(line):
            inside = True
        elif _CONTROL_END.match(line):
            inside = False
        elif inside:
            yield line


def check_circuit(circuit: str, reject_unsafe_directives: bool = True):
    """
    Validates a circuit listing.

    A missing '.end' card is not rejected here; ngspice reports it itself, and that
    report is returned to the caller as an InvalidCircuitError.
    """
    check_encoding(circuit, "circuit")
    if not reject_unsafe_directives:
        return
    for line in _control_lines(split_circuit_lines(circuit)):
        if directive := _unsafe_directive(line):
            logger.warning(f"Rejected circuit containing control directive '{directive}'.")
            raise UnsafeDirectiveError(argument="circuit", directive=directive)


def check_command(command: str, reject_unsafe_directives: bool = True):
    """Validates a single ngspice command."""
    check_encoding(command, "command")
    if not reject_unsafe_directives:
        return
    if directive := _unsafe_directive(command):
        logger.warning(f"Rejected command '{directive}'.")
        raise UnsafeDirectiveError(argument="command", directive=directive)
