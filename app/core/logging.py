from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if getattr(configure_logging, "_configured", False):
        root.setLevel(level.upper())
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    root.setLevel(level.upper())

    # uvicorn access logs are noisy at INFO.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    configure_logging._configured = True  # type: ignore[attr-defined]
