"""Export cadence, wire protocol and portrait constants."""

# Cadence: fire once every CADENCE_TICKS simulation ticks, on ticks where
# tick % CADENCE_TICKS == CADENCE_PHASE (once per second at normal speed)
CADENCE_TICKS = 60
CADENCE_PHASE = 1

# Destination defaults
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5500
DEFAULT_TIMEOUT_SECONDS = 1.0  # applied to connect, read, write and pool

# Wire protocol
DATA_PATH = "/GameData"
ASSET_PATH = "/Assets"
CONTENT_TYPE = "application/xml"
DATA_VERSION_HEADER = "X-RimIODataVersion"
DATA_VERSION = "1"

# Sentinel region id for actors that are not on any loaded region
NO_REGION_ID = -1

# Prefix for job targets that have no backing physical object
UNBACKED_TARGET_PREFIX = "?"

# Portrait framing (matches the colonist bar drawer in the host)
PORTRAIT_SIZE = (75, 75)
PORTRAIT_CAMERA_OFFSET = (0.0, 0.0, 0.3)
PORTRAIT_ZOOM = 1.28205

# Capacities reported for every actor, in wire order
CAPACITY_NAMES = (
    "BloodFiltration",
    "BloodPumping",
    "Breathing",
    "Consciousness",
    "Eating",
    "Hearing",
    "Manipulation",
    "Metabolism",
    "Moving",
    "Sight",
    "Talking",
)

REMEDIATION_HINT = "Either fix or disable in Mod Settings or start the RimIO Companion App"
