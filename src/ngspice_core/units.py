# --- src/ngspice_core/units.py ---
import pint
import logging

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.info("Pint Unit Registry initialized.")

# Fallback for vectors whose physical meaning ngspice does not report.
DIMENSIONLESS = "dimensionless"

def to_quantity(values, unit: str) -> Quantity:
    """Wraps an array of magnitudes in a Quantity from the package-wide registry."""
    return Quantity(values, ureg.parse_units(unit))
