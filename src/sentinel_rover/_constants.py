"""Internal constants shared across the package."""

DEFAULT_PORT = 3000
DEFAULT_TELEMETRY_INTERVAL = 5.0
DEFAULT_THREAT_INTERVAL = 10.0
DEFAULT_THREAT_PROBABILITY = 0.15
DEFAULT_CHANNEL_LATENCY = 0.1
RECENT_THREATS_LIMIT = 10
OBSERVER_QUEUE_SIZE = 256

DEFAULT_ALERT_TYPE = "emergency"
DEFAULT_ALERT_MESSAGE = "Hostile drone detected"

# ------------------------------------------------------------------
# Simulation bands
# ------------------------------------------------------------------

BATTERY_DRAIN_PER_TICK = 0.1
CPU_USAGE_BAND: tuple[float, float] = (35.0, 55.0)
RAM_USAGE_BAND: tuple[float, float] = (60.0, 75.0)
TEMPERATURE_BAND: tuple[float, float] = (40.0, 50.0)
MAX_MOVEMENT_PER_TICK_M = 2.0
POSITION_JITTER_DEG = 0.00001

# Threats reported without coordinates are placed within this many degrees
# of the rover, in either direction.
THREAT_OFFSET_DEG = 0.005
MAX_THREAT_DISTANCE_M = 500.0
