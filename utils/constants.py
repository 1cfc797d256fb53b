"""
Global constants for the live Eulerian video magnifier.
"""
from pathlib import Path

# Project Structure
BASE_DIR = Path(__file__).parent.parent
CONFIGS_DIR = BASE_DIR / "configs"
LOGS_DIR = BASE_DIR / "logs"
LOG_FILE_NAME = "evm.log"

# Pipeline Defaults
DEFAULT_QUEUE_SIZE = 8
DEFAULT_POP_TIMEOUT = 0.5
BACKPRESSURE_BLOCK = "block"
BACKPRESSURE_DROP_OLDEST = "drop_oldest"
BACKPRESSURE_POLICIES = (BACKPRESSURE_BLOCK, BACKPRESSURE_DROP_OLDEST)

# Display Settings
DISPLAY_BACKENDS = ("opencv", "qt", "none")
DEFAULT_POLL_INTERVAL_MS = 30
INPUT_WINDOW_LABEL = "Input"
OUTPUT_WINDOW_LABEL = "Output"

# Timing report cadence (frames)
DEFAULT_REPORT_EVERY = 30
