# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Keep local data paths out of git (.local/ is gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "PLANSTORE_APP_NAME": "App display name (default: planstore).",
    "PLANSTORE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Storage
    "PLANSTORE_DATA_DIR": "Local data directory; one <collection>.sqlite3 per store (default: .local/planstore).",
    "PLANSTORE_BACKEND": "sqlite | memory (default: sqlite). Unknown values fall back to sqlite.",
    "PLANSTORE_AUTOSAVE_SECONDS": "Quiet period before a debounced flush (default: 3.0).",
    # Policies
    "PLANSTORE_SEED_DEFAULT_PROJECT": "Create a starter project when the project store is empty (true/false).",
    "PLANSTORE_FLUSH_ON_EXIT": "Force a flush before disposing the stores on exit (true/false).",
}
