# src/ngspice_core/simulation/extractor.py
"""
Copies the vectors of ngspice's current plot into owned numpy arrays.

ngspice reports whether a vector is real or complex only by which of two payload
pointers in its `vector_info` record is set. This module turns that into an explicit
dtype and treats anything other than exactly one populated pointer as a broken
contract rather than an empty result.

Complex data is copied by reinterpreting ngspice's `ngcomplex_t` array as pairs of
doubles. That relies on `ngcomplex_t` being exactly `{double cx_real; double cx_imag;}`
with no padding, which holds for ngspice-27 through current releases; the layout is
re-checked at import.
"""
import ctypes
import logging
from typing import Dict, Iterator

import numpy as np

from ..engine.bindings import NgComplex
from ..engine.exceptions import EngineContractViolation
from ..engine.singleton import EngineGuard
from .results import DataType, VectorInfo

logger = logging.getLogger(__name__)

_COMPLEX_LAYOUT_OK = (
    ctypes.sizeof(NgComplex) == 2 * ctypes.sizeof(ctypes.c_double)
    and NgComplex.cx_real.offset == 0
    and NgComplex.cx_imag.offset == ctypes.sizeof(ctypes.c_double)
)


def _decode_name(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EngineContractViolation(f"ngSPICE sent non-UTF8 vector name {raw!r}") from e


def copy_real(data, length: int) -> np.ndarray:
    """Copies `length` doubles from a `double*` into an owned float64 array."""
    if length == 0:
        return np.empty(0, dtype=np.float64)
    return np.ctypeslib.as_array(data, shape=(length,)).astype(np.float64, copy=True)


def copy_complex(data, length: int) -> np.ndarray:
    """Copies `length` ngcomplex_t samples into an owned complex128 array."""
    if not _COMPLEX_LAYOUT_OK:
        raise EngineContractViolation("ngcomplex_t is not laid out as two adjacent doubles on this platform")
    if length == 0:
        return np.empty(0, dtype=np.complex128)
    pairs = np.ctypeslib.as_array(ctypes.cast(data, ctypes.POINTER(ctypes.c_double)), shape=(length, 2))
    values = np.empty(length, dtype=np.complex128)
    values.real = pairs[:, 0]
    values.imag = pairs[:, 1]
    return values


class ResultExtractor:
    """Reads the current plot. Callers must hold the engine guard after a successful command."""

    def __init__(self, guard: EngineGuard):
        self.guard = guard

    def vector_names(self) -> Iterator[bytes]:
        """Yields the raw names of all vectors in the current plot, in engine order."""
        library = self.guard.library
        plot = library.cur_plot()
        if not plot:
            return
        names = library.all_vecs(plot)
        if not names:
            return
        index = 0
        while names[index] is not None:
            yield names[index]
            index += 1

    def read_vector(self, raw_name: bytes):
        """Fetches and copies one vector. Returns `(name, VectorInfo)`."""
        info_ptr = self.guard.library.get_vec_info(raw_name)
        if not info_ptr:
            raise EngineContractViolation(f"ngSPICE returned no vector_info for listed vector {raw_name!r}")
        info = info_ptr.contents

        name = _decode_name(info.v_name if info.v_name is not None else raw_name)
        datatype = DataType.from_code(info.v_type)
        length = info.v_length
        if length < 0:
            raise EngineContractViolation(f"ngSPICE vector '{name}' has negative length {length}")

        has_real = bool(info.v_realdata)
        has_complex = bool(info.v_compdata)
        if has_real and has_complex:
            raise EngineContractViolation(
                f"ngSPICE vector_info '{name}' has both real and complex values"
            )
        if has_real:
            values = copy_real(info.v_realdata, length)
        elif has_complex:
            values = copy_complex(info.v_compdata, length)
        else:
            raise EngineContractViolation(
                f"ngSPICE vector_info '{name}' must have either real or complex values"
            )
        return name, VectorInfo(datatype=datatype, values=values)

    def extract(self) -> Dict[str, VectorInfo]:
        """Returns every vector of the current plot, keyed by name."""
        vectors: Dict[str, VectorInfo] = {}
        for raw_name in self.vector_names():
            name, vector = self.read_vector(raw_name)
            vectors[name] = vector
        logger.debug(f"Extracted {len(vectors)} vectors from the current plot.")
        return vectors
