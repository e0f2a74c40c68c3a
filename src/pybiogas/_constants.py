"""Internal constants shared across the library."""

DEFAULT_BAUDRATE = 9600
DEFAULT_READ_CHUNK_SIZE = 256
DEFAULT_SIMULATION_INTERVAL = 3.0

# ------------------------------------------------------------------
# Controller -> gateway telemetry labels (case-sensitive)
# ------------------------------------------------------------------

TEMPERATURE_LABEL = "Temp:"
HUMIDITY_LABEL = "Humidity:"
METHANE_LABEL = "MQ4 Analog:"

# ------------------------------------------------------------------
# Plausible ranges used by the simulation fallback
# ------------------------------------------------------------------

PH_RANGE: tuple[float, float] = (5.5, 8.5)
TEMPERATURE_RANGE: tuple[float, float] = (25.0, 35.0)
HUMIDITY_RANGE: tuple[float, float] = (40.0, 90.0)
METHANE_RANGE: tuple[int, int] = (100, 500)

# Demo NPK sensor ranges (lower bound inclusive, upper bound exclusive).
NPK_N_RANGE: tuple[int, int] = (20, 200)
NPK_P_RANGE: tuple[int, int] = (10, 100)
NPK_K_RANGE: tuple[int, int] = (50, 300)

DEFAULT_PH = 7.0
