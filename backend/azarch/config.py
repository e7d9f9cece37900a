import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Graph optimization
MAX_CONNECTORS_PER_NODE = _get_int("AZARCH_MAX_CONNECTORS", 10)

# Assessment builder thresholds (server counts)
HUB_SPOKE_SERVER_THRESHOLD = _get_int("AZARCH_HUB_SPOKE_THRESHOLD", 20)
FIREWALL_SERVER_THRESHOLD = _get_int("AZARCH_FIREWALL_THRESHOLD", 10)
NSG_SERVER_THRESHOLD = _get_int("AZARCH_NSG_THRESHOLD", 0)
LOAD_BALANCER_SERVER_THRESHOLD = _get_int("AZARCH_LB_THRESHOLD", 5)
SQL_SERVER_THRESHOLD = _get_int("AZARCH_SQL_THRESHOLD", 10)
GLOBAL_WORKLOAD_THRESHOLD = _get_int("AZARCH_GLOBAL_THRESHOLD", 50)
DEFAULT_REGION = os.getenv("AZARCH_DEFAULT_REGION", "East US")

# Layout
NODE_WIDTH = _get_int("AZARCH_NODE_WIDTH", 120)
NODE_HEIGHT = _get_int("AZARCH_NODE_HEIGHT", 70)
COLUMN_SPACING = _get_int("AZARCH_COLUMN_SPACING", 220)
ROW_SPACING = _get_int("AZARCH_ROW_SPACING", 120)
CONTAINER_PADDING = _get_int("AZARCH_CONTAINER_PADDING", 20)
CONTAINER_MARGIN = _get_int("AZARCH_CONTAINER_MARGIN", 30)

# Service
LOG_LEVEL = os.getenv("AZARCH_LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("AZARCH_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
