"""
Configuration Module

This module contains configuration settings for the application.
"""
import os
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv

# Base directory - one level up from this file
BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")

DATA_DIR = BASE_DIR / "data"
STATIC_DIR = Path(__file__).resolve().parent / "static"

# Database settings - local SQLite file unless overridden
DATABASE_PATH = DATA_DIR / "octopulse.db"
DEFAULT_DATABASE_URL = f"sqlite:///{DATABASE_PATH}"
DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

# GitHub API settings
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
GITHUB_USER_AGENT = "OctoPulse-App"
REPOS_PER_PAGE = 100  # 100 is the max for GitHub API
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# Web Push (VAPID) settings; without a private key pushes are only logged
VAPID_PUBLIC_KEY = os.getenv("VAPID_PUBLIC_KEY") or None
VAPID_PRIVATE_KEY = os.getenv("VAPID_PRIVATE_KEY") or None
VAPID_SUBJECT = os.getenv("VAPID_SUBJECT", "mailto:admin@example.com")

# API settings
API_PREFIX = "/api"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "8000"))


def ensure_data_dir():
    """Create the local data directory used by the default SQLite database."""
    DATA_DIR.mkdir(exist_ok=True, parents=True)
