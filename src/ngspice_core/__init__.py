# src/ngspice_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("ngspice-core package initialized.")

from .units import ureg, pint, Quantity
from .config import EngineConfig, ConfigParsingError, load_config
from .engine import (
    EngineSingleton,
    EngineState,
    shared_engine,
    EngineFault,
    EngineAbortedError,
    EngineContractViolation,
    EnginePoisonedError,
)
from .simulation import (
    simulate,
    DataType,
    VectorInfo,
    SimulationRecord,
    InvalidStringEncodingError,
    UnsafeDirectiveError,
    InvalidCircuitError,
    UnknownEngineError,
)
from .errors import NgspiceCoreError, SimulationError, LibraryLoadError, DiagnosableError

__all__ = [
    # Units
    "ureg", "pint", "Quantity",
    # Configuration
    "EngineConfig", "ConfigParsingError", "load_config",
    # Engine
    "EngineSingleton", "EngineState", "shared_engine",
    # Simulation
    "simulate", "DataType", "VectorInfo", "SimulationRecord",
    # Ordinary (recoverable) errors
    "NgspiceCoreError", "SimulationError", "LibraryLoadError", "DiagnosableError",
    "InvalidStringEncodingError", "UnsafeDirectiveError", "InvalidCircuitError", "UnknownEngineError",
    # Unrecoverable engine faults
    "EngineFault", "EngineAbortedError", "EngineContractViolation", "EnginePoisonedError",
]
