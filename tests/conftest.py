# tests/conftest.py
"""
Shared fixtures and the substitute engine for the ngspice-core test suite.

`FakeNgspiceLibrary` stands in for `NgspiceLibrary` at the ctypes level: it calls the
registered callbacks through their real ctypes function pointers (with the real
opaque context token), reads the NULL-terminated line array built by the loader, and
serves `vector_info` records backed by ctypes buffers. Everything above the foreign
call boundary therefore runs exactly as it does against the native library.

Behaviour of the fake, keyed by the command text:
- `op`, `tran ...`, `ac ...`: populate a plot from the nodes of the loaded circuit.
- `fatal`: invoke the fatal-exit hook and return non-zero.
- `garbage`: emit non-UTF-8 output.
- `novalues` / `bothvalues` / `weirdtype`: serve malformed or unusual vectors.
- `weirdname` / `nullinfo` / `negativelength`: serve a non-UTF-8 vector name, a listed
  vector without a `vector_info`, and a negative length.
- anything else: report an error on stderr and return non-zero.
A circuit without an `.end` line is rejected with a parse error on stderr.
"""
import ctypes
import threading
import time
from typing import Dict, List, Optional, Tuple

import pytest

from ngspice_core.config import EngineConfig
from ngspice_core.engine import EngineSingleton
from ngspice_core.engine.bindings import NgComplex, PCharArray, PVectorInfo, VectorInfo as CVectorInfo, find_library
from ngspice_core.errors import LibraryLoadError

SV_NOTYPE, SV_TIME, SV_FREQUENCY, SV_VOLTAGE, SV_CURRENT = 0, 1, 2, 3, 4

DIVIDER_CIRCUIT = """.title voltage divider
V1 in 0 dc 10
R1 in mid 1k
R2 mid 0 1k
.end"""

RC_CIRCUIT = """.title rc lowpass
V1 in 0 dc 0 ac 1 sin(0 1 1k)
R1 in out 1k
C1 out 0 1u
.end"""

MISSING_END_CIRCUIT = """.title no terminator
V1 in 0 dc 1
R1 in 0 1k"""


def circuit_nodes(lines: List[str]) -> Tuple[List[str], List[str]]:
    """Returns (node names, voltage source names) found in element lines."""
    nodes: List[str] = []
    sources: List[str] = []
    for line in lines:
        tokens = line.split()
        if not tokens or tokens[0].startswith((".", "*")) or len(tokens) < 3:
            continue
        for node in tokens[1:3]:
            if node.lower() not in ("0", "gnd") and node not in nodes:
                nodes.append(node)
        if tokens[0][0].lower() == "v":
            sources.append(tokens[0].lower())
    return nodes, sources


class FakeNgspiceLibrary:
    """Recording, ctypes-level substitute for the ngspice shared library."""

    def __init__(self, init_status: int = 0, emit_delay: float = 0.0):
        self.init_status = init_status
        self.emit_delay = emit_delay
        self.calls: List[Tuple[str, object]] = []
        self.max_concurrency = 0
        self._active = 0
        self._active_lock = threading.Lock()
        self._send_char = None
        self._controlled_exit = None
        self._context = None
        self.circuit: List[str] = []
        self._plot_name: Optional[bytes] = None
        self._vectors: Dict[bytes, CVectorInfo] = {}
        # Listed by all_vecs but unknown to get_vec_info.
        self._dangling_names: List[bytes] = []
        self._keepalive: list = []

    # --- Bookkeeping ---

    def _enter(self, name, arg):
        with self._active_lock:
            self.calls.append((name, arg))
            self._active += 1
            self.max_concurrency = max(self.max_concurrency, self._active)

    def _leave(self):
        with self._active_lock:
            self._active -= 1

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def emit(self, text):
        if isinstance(text, str):
            text = text.encode("utf-8")
        self._send_char(text, 0, self._context)
        if self.emit_delay:
            time.sleep(self.emit_delay)

    # --- Plot construction ---

    def _new_plot(self, name: bytes):
        self._plot_name = name
        self._vectors = {}
        self._dangling_names = []
        self._keepalive = []

    def add_real(self, name: str, vtype: int, values):
        buffer = (ctypes.c_double * len(values))(*values)
        self._keepalive.append(buffer)
        self._add(name, vtype, ctypes.cast(buffer, ctypes.POINTER(ctypes.c_double)), None, len(values))

    def add_complex(self, name: str, vtype: int, values):
        buffer = (NgComplex * len(values))(*[NgComplex(v.real, v.imag) for v in values])
        self._keepalive.append(buffer)
        self._add(name, vtype, None, ctypes.cast(buffer, ctypes.POINTER(NgComplex)), len(values))

    def _add(self, name, vtype: int, realdata, compdata, length: int):
        raw_name = name if isinstance(name, bytes) else name.encode("utf-8")
        info = CVectorInfo()
        info.v_name = raw_name
        info.v_type = vtype
        info.v_flags = 0
        if realdata is not None:
            info.v_realdata = realdata
        if compdata is not None:
            info.v_compdata = compdata
        info.v_length = length
        self._vectors[raw_name] = info

    # --- ngspice entry points ---

    def init(self, send_char, controlled_exit, context: int) -> int:
        self._enter("init", context)
        try:
            self._send_char = send_char
            self._controlled_exit = controlled_exit
            self._context = context
            return self.init_status
        finally:
            self._leave()

    def circ(self, lines) -> int:
        received = []
        for raw in lines:
            if raw is None:
                break
            received.append(raw.decode("utf-8"))
        self._enter("circ", received)
        try:
            title = received[0] if received else ""
            self.emit(f"stdout Circuit: {title}")
            if not any(line.strip().lower() == ".end" for line in received):
                self.emit("stderr Error: no .end card found in input deck")
                self.emit(f"stderr Error: circuit '{title}' not parsed")
                return 1
            self.circuit = received
            self.emit(f"stderr Note: loaded {title}")
            return 0
        finally:
            self._leave()

    def command(self, command: bytes) -> int:
        text = command.decode("utf-8")
        self._enter("command", text)
        try:
            return self._run(text)
        finally:
            self._leave()

    def _run(self, text: str) -> int:
        verb = text.split()[0] if text.split() else ""
        nodes, sources = circuit_nodes(self.circuit)
        title = self.circuit[0] if self.circuit else ""
        if verb == "op":
            self.emit(f"stdout Doing analysis at TEMP = 27.000000 for {title}")
            self._new_plot(b"op1")
            for index, node in enumerate(nodes):
                self.add_real(node, SV_VOLTAGE, [float(index + 1)])
            for source in sources:
                self.add_real(f"{source}#branch", SV_CURRENT, [-0.005])
            self.emit(f"No. of Data Rows : 1 ({title})")
            return 0
        if verb == "tran":
            self._new_plot(b"tran1")
            times = [0.0, 1e-4, 2e-4, 3e-4, 4e-4]
            self.add_real("time", SV_TIME, times)
            for node in nodes:
                self.add_real(node, SV_VOLTAGE, [t * 1000.0 for t in times])
            self.emit(f"stdout No. of Data Rows : {len(times)} ({title})")
            self.emit(f"stderr Warning: transient timestep adjusted for {title}")
            return 0
        if verb == "ac":
            self._new_plot(b"ac1")
            freqs = [1.0, 10.0, 100.0]
            self.add_complex("frequency", SV_FREQUENCY, [complex(f, 0.0) for f in freqs])
            for node in nodes:
                self.add_complex(node, SV_VOLTAGE, [complex(1.0 / (1 + f), -f / (1 + f)) for f in freqs])
            self.emit(f"stdout No. of Data Rows : {len(freqs)} ({title})")
            return 0
        if verb == "fatal":
            self.emit("stderr Error: ngspice.dll cannot recover and awaits to be detached")
            self._controlled_exit(1, False, False, 0, self._context)
            return 1
        if verb == "garbage":
            self.emit(b"stdout \xff\xfe broken")
            self._new_plot(b"op1")
            return 0
        if verb == "novalues":
            self._new_plot(b"op1")
            self._add("empty", SV_VOLTAGE, None, None, 1)
            return 0
        if verb == "bothvalues":
            self._new_plot(b"op1")
            buffer = (ctypes.c_double * 1)(1.0)
            pair = (NgComplex * 1)(NgComplex(1.0, 2.0))
            self._keepalive.extend([buffer, pair])
            self._add(
                "both", SV_VOLTAGE,
                ctypes.cast(buffer, ctypes.POINTER(ctypes.c_double)),
                ctypes.cast(pair, ctypes.POINTER(NgComplex)),
                1,
            )
            return 0
        if verb == "weirdname":
            self._new_plot(b"op1")
            self.add_real(b"\xff", SV_VOLTAGE, [1.0])
            return 0
        if verb == "nullinfo":
            self._new_plot(b"op1")
            self._dangling_names.append(b"ghost")
            return 0
        if verb == "negativelength":
            self._new_plot(b"op1")
            self.add_real("short", SV_VOLTAGE, [1.0])
            self._vectors[b"short"].v_length = -1
            return 0
        if verb == "weirdtype":
            self._new_plot(b"op1")
            self.add_real("mystery", 99, [1.0, 2.0])
            self.add_real("empty", SV_VOLTAGE, [])
            return 0
        self.emit(f"stderr Error: {verb} is not a valid command")
        return 1

    def cur_plot(self) -> Optional[bytes]:
        self._enter("cur_plot", None)
        self._leave()
        return self._plot_name

    def all_vecs(self, plot: bytes):
        self._enter("all_vecs", plot)
        self._leave()
        names = list(self._vectors) + self._dangling_names
        array = (ctypes.c_char_p * (len(names) + 1))(*names, None)
        self._keepalive.append(array)
        return ctypes.cast(array, PCharArray)

    def get_vec_info(self, name: bytes):
        self._enter("get_vec_info", name)
        self._leave()
        info = self._vectors.get(name)
        if info is None:
            return PVectorInfo()
        return ctypes.pointer(info)


def ngspice_available() -> bool:
    try:
        find_library()
    except LibraryLoadError:
        return False
    return True


requires_ngspice = pytest.mark.skipif(
    not ngspice_available(), reason="ngspice shared library (libngspice) is not installed"
)


# --- Fixtures ---

@pytest.fixture
def fake_library():
    return FakeNgspiceLibrary()

@pytest.fixture
def engine_config():
    return EngineConfig()

@pytest.fixture
def engine(fake_library, engine_config):
    """A private engine singleton backed by the fake library."""
    return EngineSingleton(library_factory=lambda config: fake_library, config=engine_config)
