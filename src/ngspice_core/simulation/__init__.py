# src/ngspice_core/simulation/__init__.py
from .exceptions import (
    InvalidStringEncodingError,
    UnsafeDirectiveError,
    InvalidCircuitError,
    UnknownEngineError,
)
from .results import DataType, VectorInfo, SimulationRecord
from .loader import CircuitLoader
from .executor import CommandExecutor
from .extractor import ResultExtractor
from .execution import simulate

__all__ = [
    # Exceptions
    "InvalidStringEncodingError",
    "UnsafeDirectiveError",
    "InvalidCircuitError",
    "UnknownEngineError",
    # Results
    "DataType",
    "VectorInfo",
    "SimulationRecord",
    # Core Classes
    "CircuitLoader",
    "CommandExecutor",
    "ResultExtractor",
    "simulate",
]
