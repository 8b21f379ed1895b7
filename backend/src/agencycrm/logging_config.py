"""Logging setup shared by the API and the CLI."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the ``agencycrm`` logger.

    Calling it again replaces the handler, so it always writes to the
    current ``sys.stderr``.
    """
    root = logging.getLogger("agencycrm")
    root.setLevel(level.upper())

    for existing in [h for h in root.handlers if getattr(h, "_agencycrm", False)]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._agencycrm = True  # type: ignore[attr-defined]
    root.addHandler(handler)
