# src/ngspice_core/simulation/results.py
"""
Defines the formal, owned data contracts returned by `simulate()`.

Nothing in these objects refers back to ngspice memory. All vector data is copied
out of the engine while the engine guard is still held, so a `SimulationRecord`
stays valid after later runs overwrite the engine's current plot.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

import numpy as np

from ..units import DIMENSIONLESS, Quantity, to_quantity


class DataType(Enum):
    """
    Physical meaning of a result vector, mirroring ngspice's `simulation_types` enum.

    Each member's value is `(type code, pint unit)`. Codes that are not listed here map
    to `UNKNOWN`, so newer ngspice releases that add types keep working.
    """
    UNKNOWN = (0, DIMENSIONLESS)
    TIME = (1, "s")
    FREQUENCY = (2, "Hz")
    VOLTAGE = (3, "V")
    CURRENT = (4, "A")
    VOLTAGE_DENSITY = (5, "V / Hz ** 0.5")
    CURRENT_DENSITY = (6, "A / Hz ** 0.5")
    SQR_VOLTAGE_DENSITY = (7, "V ** 2 / Hz")
    SQR_CURRENT_DENSITY = (8, "A ** 2 / Hz")
    SQR_VOLTAGE = (9, "V ** 2")
    SQR_CURRENT = (10, "A ** 2")
    POLE = (11, DIMENSIONLESS)
    ZERO = (12, DIMENSIONLESS)
    SPARAM = (13, DIMENSIONLESS)
    TEMP = (14, "degC")
    RES = (15, "ohm")
    IMPEDANCE = (16, "ohm")
    ADMITTANCE = (17, "S")
    POWER = (18, "W")
    PHASE = (19, "rad")
    DB = (20, "dB")
    CAPACITANCE = (21, "F")
    CHARGE = (22, "C")

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def unit(self) -> str:
        return self.value[1]

    @classmethod
    def from_code(cls, code: int) -> "DataType":
        return _DATATYPE_BY_CODE.get(code, cls.UNKNOWN)


_DATATYPE_BY_CODE = {member.code: member for member in DataType}


@dataclass(frozen=True, eq=False)
class VectorInfo:
    """
    One named result vector.

    Attributes:
        datatype: The physical meaning reported by ngspice.
        values: An owned 1-D array; `float64` for real vectors, `complex128` for complex
                ones. Exactly one of the two is produced per vector.
    """
    datatype: DataType
    values: np.ndarray

    @property
    def is_complex(self) -> bool:
        return np.iscomplexobj(self.values)

    @property
    def is_real(self) -> bool:
        return not self.is_complex

    def __len__(self) -> int:
        return len(self.values)

    def to_quantity(self) -> Quantity:
        """Returns the values as a pint Quantity in the unit implied by `datatype`."""
        return to_quantity(self.values, self.datatype.unit)


@dataclass(frozen=True, eq=False)
class SimulationRecord:
    """
    The results of a single `simulate()` call (one ngspice plot).

    Attributes:
        stdout: Everything ngspice wrote to its standard stream during the run.
        stderr: Everything ngspice wrote to its error stream during the run.
        vectors: All output vectors of the run, keyed by ngspice's vector name.
    """
    stdout: str = ""
    stderr: str = ""
    vectors: Dict[str, VectorInfo] = field(default_factory=dict)
