import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./backoffice.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Upper bound on occurrences generated for an open-ended recurring series
MAX_RECURRING_OCCURRENCES = int(os.getenv("MAX_RECURRING_OCCURRENCES", "10"))

# Largest series a COUNT or UNTIL rule may expand to; longer ones are rejected
MAX_SERIES_OCCURRENCES = int(os.getenv("MAX_SERIES_OCCURRENCES", "52"))

# CORS - origins of the back-office and client-portal frontends
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:3001",
).split(",")
