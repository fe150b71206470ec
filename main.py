import sys

# --- Settings/Logging ---
from scoresheet.logging.setup import setup_logging

setup_logging()

from loguru import logger

from scoresheet.cli import main

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
