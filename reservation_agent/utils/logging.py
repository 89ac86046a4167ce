from __future__ import annotations

import logging

_CONTEXT_KEYS = ("step", "booking_id", "location", "reason")


class ContextFormatter(logging.Formatter):
    """Appends known ``extra=`` fields to the rendered record as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in _CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
