# config.py
import os

APP_NAME = "EQUIP-TRACK"
APP_VERSION = "1.4 Enterprise Edition"

# Database
DB_URL = os.getenv("EQUIP_TRACK_DB_URL", "sqlite:///equip_track.db")
DB_ECHO = os.getenv("EQUIP_TRACK_DB_ECHO", "false").lower() == "true"

# Logging
LOG_LEVEL = os.getenv("EQUIP_TRACK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Tables
TABLE_ASSETS = "assets"
TABLE_EMPLOYEES = "employees"
TABLE_HISTORY = "asset_history"

# Status vocabulary
STATUS_AVAILABLE = "Available"
STATUS_IN_USE = "In Use"
STATUS_MAINTENANCE = "Maintenance"
STATUSES = (STATUS_AVAILABLE, STATUS_IN_USE, STATUS_MAINTENANCE)
STATUS_FILTER_ALL = "All"

# Type vocabulary
MAIN_ASSET_TYPES = ("Laptop", "PC", "Phone", "Tablet")
ACCESSORY_TYPES = ("Keyboard", "Mouse", "Mouse Pad", "Monitor", "Headset", "Cable", "Accessory", "Other")

# Accessory groups that start expanded
DEFAULT_OPEN_GROUPS = ("Keyboard", "Mouse", "Monitor", "Laptop", "PC")

# History actions
ACTION_RETURNED = "Returned"
ACTION_MAINTENANCE = "Maintenance"
ACTION_DEPLOYED = "Deployed"
ACTION_CREATED = "Created"
MAINTENANCE_DETAILS = "Marked as broken/maintenance"

# Column headers for the asset tables
ASSET_COLUMNS = {
    "name": "Name",
    "type": "Type",
    "status": "Status",
    "assigned_to": "Assigned To",
    "serial_number": "Serial",
}
