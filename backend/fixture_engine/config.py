import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Allocator gives up after max(MIN_ALLOCATOR_ATTEMPTS, factor * entrant_count) day advances per fixture
ALLOCATOR_ATTEMPTS_PER_ENTRANT = int(os.getenv("ALLOCATOR_ATTEMPTS_PER_ENTRANT", "10"))
MIN_ALLOCATOR_ATTEMPTS = 20

DEFAULT_ADVANCING_PER_GROUP = int(os.getenv("DEFAULT_ADVANCING_PER_GROUP", "2"))

CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    CORS_ORIGINS.extend(o.strip() for o in _extra.split(",") if o.strip())
