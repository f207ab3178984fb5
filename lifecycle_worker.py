"""
Process entry point for the lifecycle watcher.
"""

import logging
import sys

# Configure logging first
from lifecycle_watcher.common.logger import setup_logging

setup_logging()

from lifecycle_watcher.main import run


def main() -> int:
    """
    Run the watcher until it is stopped or hits a fatal error.

    Returns:
        int: Process exit code, non-zero when the watch loop failed
    """
    try:
        run()
    except Exception as e:
        logging.critical(f"Lifecycle watcher stopped: {e}", exc_info=True)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
