"""Environment-driven settings (a .env file is honoured if present)."""

import os
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("CERTBAR_LOG_LEVEL", "WARNING").upper()

# Unrecognized usage/hash tokens raise instead of being defaulted
STRICT_TOKENS = os.getenv("CERTBAR_STRICT_TOKENS", "0").lower() in ("1", "true", "yes", "on")
