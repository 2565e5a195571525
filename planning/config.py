"""Runtime configuration, read from the environment (and an optional .env)."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# "block" rejects a conflicting submission, "warn" stores it and notifies the owner
CONFLICT_POLICY = os.getenv("CONFLICT_POLICY", "block").lower()

# Horizon applied to recurrences that never end
RECURRENCE_HORIZON_DAYS = int(os.getenv("RECURRENCE_HORIZON_DAYS", "365"))

# Hard ceiling on the size of one expanded series
MAX_OCCURRENCES = int(os.getenv("MAX_OCCURRENCES", "1000"))

# Slack allowed when matching the morning/afternoon windows; 0 means exact
SLOT_TOLERANCE_MINUTES = int(os.getenv("SLOT_TOLERANCE_MINUTES", "0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
