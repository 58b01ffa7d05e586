"""Environment configuration and .env loading.

WHY: Deployments pick the subtitle language preset and log verbosity without
code changes. Loading them from the environment (optionally via a .env file)
keeps those choices next to the rest of the service configuration.

HOW: python-dotenv loads the .env file on import. Values are read into
module-level constants with defaults.

RULES:
- SUBTITLE_PRESET selects the preset used when a caller passes none.
- SUBTITLE_LOG_LEVEL is applied by the CLI only; the library never
  configures logging itself.
- An unknown preset name fails later, in presets.resolve_config().
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the working directory
load_dotenv()

DEFAULT_PRESET = os.getenv("SUBTITLE_PRESET", "german").strip().lower() or "german"
LOG_LEVEL = os.getenv("SUBTITLE_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
