import logging


def configure_logging(level: str = "INFO") -> None:
    """Configure structured logging defaults for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
