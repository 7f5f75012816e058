# src/ngspice_core/engine/bindings.py
"""
ctypes declarations for the subset of the ngspice shared-library API used by this package.

Only the entry points needed for a synchronous load / run / read-back cycle are declared:
`ngSpice_Init`, `ngSpice_Circ`, `ngSpice_Command`, `ngSpice_CurPlot`, `ngSpice_AllVecs`
and `ngGet_Vec_Info`. The layouts follow `sharedspice.h` as shipped since ngspice-27.
"""
import ctypes
import ctypes.util
import logging
import sys
from typing import Optional

from ..errors import LibraryLoadError

logger = logging.getLogger(__name__)


class NgComplex(ctypes.Structure):
    """`ngcomplex_t`: one complex sample stored as two adjacent doubles."""
    _fields_ = [("cx_real", ctypes.c_double), ("cx_imag", ctypes.c_double)]


class VectorInfo(ctypes.Structure):
    """`vector_info`: one result vector of the current plot."""
    _fields_ = [
        ("v_name", ctypes.c_char_p),
        ("v_type", ctypes.c_int),
        ("v_flags", ctypes.c_short),
        ("v_realdata", ctypes.POINTER(ctypes.c_double)),
        ("v_compdata", ctypes.POINTER(NgComplex)),
        ("v_length", ctypes.c_int),
    ]


PVectorInfo = ctypes.POINTER(VectorInfo)
PCharArray = ctypes.POINTER(ctypes.c_char_p)

# int SendChar(char *output, int ident, void *userdata)
SendChar = ctypes.CFUNCTYPE(ctypes.c_int, ctypes.c_char_p, ctypes.c_int, ctypes.c_void_p)

# int ControlledExit(int status, bool immediate, bool quit_upon_exit, int ident, void *userdata)
ControlledExit = ctypes.CFUNCTYPE(
    ctypes.c_int,
    ctypes.c_int,
    ctypes.c_bool,
    ctypes.c_bool,
    ctypes.c_int,
    ctypes.c_void_p,
)


def default_library_name() -> str:
    """Returns the platform's default soname for the ngspice shared library."""
    if sys.platform == "win32":
        return "libngspice-0.dll"
    elif sys.platform == "darwin":
        return "libngspice.0.dylib"
    else:
        return "libngspice.so.0"


def find_library(library_path: Optional[str] = None) -> ctypes.CDLL:
    """
    Loads the ngspice shared library.

    Args:
        library_path: Explicit path or soname. When None, the platform default name is
                      tried first, then whatever `ctypes.util.find_library` reports.

    Raises:
        LibraryLoadError: If no candidate can be loaded.
    """
    candidates = [library_path] if library_path else [default_library_name(), ctypes.util.find_library("ngspice")]
    errors = []
    for candidate in candidates:
        if not candidate:
            continue
        try:
            lib = ctypes.CDLL(candidate)
        except OSError as e:
            errors.append(f"{candidate}: {e}")
            continue
        logger.info(f"Loaded ngspice shared library '{candidate}'.")
        return lib
    raise LibraryLoadError(
        "Unable to load the ngspice shared library. Install ngspice built with "
        "--with-ngshared, or set NGSPICE_LIBRARY_PATH. Tried:\n  " + "\n  ".join(errors or ["(no candidates)"])
    )


class NgspiceLibrary:
    """
    Thin, typed wrapper around the loaded ngspice shared library.

    Every method maps to exactly one foreign call and returns its raw result. The
    wrapper does no locking and no validation; that is the job of the engine singleton
    and the simulation components.
    """

    def __init__(self, lib: ctypes.CDLL):
        self.lib = lib
        self._setup_library_functions()

    @classmethod
    def load(cls, library_path: Optional[str] = None) -> "NgspiceLibrary":
        return cls(find_library(library_path))

    def _setup_library_functions(self):
        self.lib.ngSpice_Init.restype = ctypes.c_int
        self.lib.ngSpice_Init.argtypes = [
            SendChar,
            ctypes.c_void_p,  # SendStat, unused
            ControlledExit,
            ctypes.c_void_p,  # SendData, unused
            ctypes.c_void_p,  # SendInitData, unused
            ctypes.c_void_p,  # BGThreadRunning, unused
            ctypes.c_void_p,
        ]

        self.lib.ngSpice_Circ.restype = ctypes.c_int
        self.lib.ngSpice_Circ.argtypes = [PCharArray]

        self.lib.ngSpice_Command.restype = ctypes.c_int
        self.lib.ngSpice_Command.argtypes = [ctypes.c_char_p]

        self.lib.ngSpice_CurPlot.restype = ctypes.c_char_p
        self.lib.ngSpice_CurPlot.argtypes = []

        self.lib.ngSpice_AllVecs.restype = PCharArray
        self.lib.ngSpice_AllVecs.argtypes = [ctypes.c_char_p]

        self.lib.ngGet_Vec_Info.restype = PVectorInfo
        self.lib.ngGet_Vec_Info.argtypes = [ctypes.c_char_p]

    def init(self, send_char, controlled_exit, context: int) -> int:
        return self.lib.ngSpice_Init(send_char, None, controlled_exit, None, None, None, context)

    def circ(self, lines) -> int:
        # ngspice does not mutate the lines, but its prototype is not const-qualified.
        return self.lib.ngSpice_Circ(lines)

    def command(self, command: bytes) -> int:
        return self.lib.ngSpice_Command(command)

    def cur_plot(self) -> Optional[bytes]:
        return self.lib.ngSpice_CurPlot()

    def all_vecs(self, plot: bytes):
        return self.lib.ngSpice_AllVecs(plot)

    def get_vec_info(self, name: bytes):
        return self.lib.ngGet_Vec_Info(name)
