"""Configuration for the LaMetric icon scraper."""

import os

# Checkpoint location
OUTPUT_DIR = os.path.expanduser(os.getenv("OUTPUT_DIR", "~/lametric-icons"))
REGISTRY_FILENAME = "icons.json"
PROGRESS_FILENAME = ".progress.json"

# Paging
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "80"))
ESTIMATED_TOTAL = int(os.getenv("ESTIMATED_TOTAL", "69007"))  # Used until the API reports count_all
DELAY_SECONDS = float(os.getenv("DELAY_SECONDS", "0.5"))  # Pause after every page
SAVE_EVERY = int(os.getenv("SAVE_EVERY", "5"))  # Intermediate checkpoint every K page indices
STAGNATION_WINDOW = int(os.getenv("STAGNATION_WINDOW", "5"))  # Stale pages tolerated past the start page

# Source and reporting
SOURCE = os.getenv("SOURCE", "lametric").strip().lower()
SUMMARY_TOP_N = int(os.getenv("SUMMARY_TOP_N", "15"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_STDOUT = os.getenv("LOG_TO_STDOUT", "true").lower() == "true"
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() == "true"
LOG_FILE = os.path.expanduser(os.getenv("LOG_FILE", os.path.join(OUTPUT_DIR, "scraper.log")))
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(2 * 1024 * 1024)))
LOG_BACKUPS = int(os.getenv("LOG_BACKUPS", "3"))
