# servicedesk/backend/app/config.py
import os

from dotenv import load_dotenv

# Load settings from .env at project root
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set in environment/.env")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Assignment policy: when enabled, assigning a technician to an Open request
# also moves it to InProgress.
ASSIGN_AUTO_ADVANCE = os.getenv("ASSIGN_AUTO_ADVANCE", "false").lower() in {
    "1",
    "true",
    "yes",
}

# First admin created on startup when the users table has no admin yet
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@servicedesk.local")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin12345")

# Paging
REQUEST_PAGE_SIZE_DEFAULT = 10
REQUEST_PAGE_SIZE_MAX = 100
USER_PAGE_SIZE_DEFAULT = 20
USER_PAGE_SIZE_MAX = 50

# Dashboard feeds
RECENT_ACTIVITY_LIMIT = 5
HIGH_PRIORITY_LIMIT = 5
