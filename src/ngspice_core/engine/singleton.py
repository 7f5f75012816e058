# src/ngspice_core/engine/singleton.py
"""
Provides `EngineSingleton`, the sole owner of the process-wide ngspice engine.

ngspice is a single global, non-reentrant state machine that can be initialized only
once per process. This module enforces three rules around it:

1.  **Initialize once:** The first acquisition loads the library, creates the
    `EngineHandle` and registers the callbacks with the handle's address as context.
    Concurrent first callers are serialized by an initialization lock; exactly one of
    them performs the work.
2.  **Exclusive access:** The handle and library are reachable only through the guard
    yielded by `acquire()`. At most one guard exists at a time.
3.  **Poisoning:** If a guard is left by anything other than a normal return or an
    ordinary `SimulationError` (an `EngineFault`, an unexpected exception, a
    `KeyboardInterrupt` mid-call), the engine's state is unknown and every later
    acquisition raises `EnginePoisonedError`. There is no recovery path; ngspice
    cannot be shut down or re-initialized.
"""
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from ..config import EngineConfig, load_config
from ..errors import LibraryLoadError, SimulationError
from .bindings import NgspiceLibrary
from .callbacks import CONTROLLED_EXIT_CALLBACK, SEND_CHAR_CALLBACK, handle_context
from .exceptions import EngineAbortedError, EnginePoisonedError
from .handle import EngineHandle, EngineState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineGuard:
    """Exclusive access to the engine, valid only inside `EngineSingleton.acquire()`."""
    handle: EngineHandle
    library: NgspiceLibrary
    config: EngineConfig


class EngineSingleton:
    """
    Owns the one engine handle and the lock that serializes every use of it.

    Args:
        library_factory: Callable returning the library wrapper. Defaults to loading the
                         shared library named by the configuration. Tests substitute a fake.
        config: Engine configuration. Defaults to `load_config()` at first acquisition.
    """

    def __init__(
        self,
        library_factory: Optional[Callable[[EngineConfig], NgspiceLibrary]] = None,
        config: Optional[EngineConfig] = None,
    ):
        self._library_factory = library_factory or (lambda cfg: NgspiceLibrary.load(cfg.library_path))
        self._config = config
        self._init_lock = threading.Lock()
        self._lock = threading.Lock()
        self._owner: Optional[int] = None
        self._handle: Optional[EngineHandle] = None
        self._library: Optional[NgspiceLibrary] = None
        self._poisoned_by: Optional[str] = None

    @property
    def state(self) -> EngineState:
        handle = self._handle
        return handle.state if handle is not None else EngineState.UNINITIALIZED

    @property
    def poisoned(self) -> bool:
        return self._poisoned_by is not None

    def get_config(self) -> EngineConfig:
        """Returns the configuration, loading it on first use."""
        if self._config is None:
            with self._init_lock:
                if self._config is None:
                    self._config = load_config()
        return self._config

    def configure(self, config: EngineConfig):
        """Replaces the configuration. Only allowed before the engine is initialized."""
        with self._init_lock:
            if self._library is not None:
                raise RuntimeError("The ngspice engine is already initialized; configure it before first use.")
            self._config = config

    def _ensure_initialized(self):
        if self._library is not None:
            return
        with self._init_lock:
            if self._library is not None:
                return
            if self._poisoned_by is not None:
                raise EnginePoisonedError(f"ngspice initialization previously failed: {self._poisoned_by}")

            config = self._config if self._config is not None else load_config()
            self._config = config
            library = self._library_factory(config)

            # The handle is never replaced after this point: ngspice keeps its address.
            handle = EngineHandle(fatal_policy=config.fatal_policy)
            handle.state = EngineState.INITIALIZING
            self._handle = handle
            logger.debug(f"Initializing ngspice with callback context 0x{handle_context(handle):x}.")
            status = library.init(SEND_CHAR_CALLBACK, CONTROLLED_EXIT_CALLBACK, handle_context(handle))
            if status != 0:
                self._poisoned_by = f"ngSpice_Init returned {status}"
                raise LibraryLoadError(f"Failed to initialize ngspice (ngSpice_Init returned {status}).")
            if handle.state is EngineState.INITIALIZING:
                handle.state = EngineState.READY

            self._library = library
            logger.info("ngspice engine initialized.")

    def _check_usable(self):
        handle = self._handle
        if handle.aborted:
            raise EngineAbortedError(handle.exit_status or 0)
        if self._poisoned_by is not None:
            raise EnginePoisonedError(
                f"The ngspice engine is unusable after a previous failure: {self._poisoned_by}"
            )

    @contextmanager
    def acquire(self) -> Iterator[EngineGuard]:
        """
        Initializes the engine if needed and yields an exclusive `EngineGuard`.

        Blocks while another thread holds the guard. There is no timeout: the engine's
        own calls cannot be interrupted, so waiting is the only option.

        Raises:
            EngineAbortedError: If ngspice has called its fatal-exit hook.
            EnginePoisonedError: If a previous holder left the guard abnormally.
            RuntimeError: If the calling thread already holds the guard.
        """
        self._ensure_initialized()
        if self._owner == threading.get_ident():
            raise RuntimeError("The ngspice engine guard is not re-entrant.")

        with self._lock:
            self._check_usable()
            self._owner = threading.get_ident()
            handle = self._handle
            handle.state = EngineState.BUSY
            try:
                yield EngineGuard(handle=handle, library=self._library, config=self._config)
            except SimulationError:
                raise
            except GeneratorExit:
                raise
            except BaseException as e:
                self._poisoned_by = f"{type(e).__name__}: {e}"
                logger.critical(f"ngspice engine poisoned while in use: {self._poisoned_by}")
                raise
            finally:
                self._owner = None
                if handle.state is EngineState.BUSY:
                    handle.state = EngineState.READY


_SHARED_ENGINE = EngineSingleton()


def shared_engine() -> EngineSingleton:
    """Returns the process-wide engine used by `simulate()` when none is injected."""
    return _SHARED_ENGINE
