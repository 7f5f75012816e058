# src/ngspice_core/engine/__init__.py
"""
Exposes the process-wide ngspice engine and its fault types.
"""
from .exceptions import (
    EngineFault,
    EngineAbortedError,
    EngineContractViolation,
    EnginePoisonedError,
)
from .handle import EngineHandle, EngineState
from .bindings import NgspiceLibrary
from .singleton import EngineGuard, EngineSingleton, shared_engine

__all__ = [
    # Faults
    "EngineFault",
    "EngineAbortedError",
    "EngineContractViolation",
    "EnginePoisonedError",
    # Core Classes
    "EngineHandle",
    "EngineState",
    "NgspiceLibrary",
    "EngineGuard",
    "EngineSingleton",
    "shared_engine",
]
