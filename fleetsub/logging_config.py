"""
Logging setup shared by the application and scripts.
"""
import logging


def configure_logging(level="INFO"):
    """Configure logging defaults for the application."""
    logging.basicConfig(
        level=level.upper() if isinstance(level, str) else level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
