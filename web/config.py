"""Shared config for the interview tracker API."""
import os
from pathlib import Path

from dotenv import load_dotenv

from artifacts.config import ArtifactConfig

load_dotenv()

# Project root (the directory holding main.py)
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.getenv("DATA_DIR") or PROJECT_ROOT / "data")
TRACKER_DB = Path(os.getenv("TRACKER_DB") or DATA_DIR / "tracker.json")

JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = "HS256"
TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "24"))


def artifact_config() -> ArtifactConfig:
    return ArtifactConfig.from_env(PROJECT_ROOT)
