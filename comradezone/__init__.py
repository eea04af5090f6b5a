"""ComradeZone core: moderation, anonymous rate limiting, notification fan-out and broadcasts."""

__version__ = "0.1.0"
