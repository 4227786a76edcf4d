"""Configuration settings for the object store."""

import os
from pathlib import Path

from common.constants import DEFAULT_NAMESPACE


DEFAULT_DATABASE_PATH = str(Path.home() / ".gridfiles" / "gridstore.db")

DATABASE_PATH = os.environ.get("FILES_DATABASE_PATH", DEFAULT_DATABASE_PATH)

NAMESPACE = os.environ.get("FILES_NAMESPACE", DEFAULT_NAMESPACE)
