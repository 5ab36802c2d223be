"""Operator-facing notifications."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Notice:
    """A message shown to the till operator."""

    level: str
    title: str
    message: str

    @classmethod
    def info(cls, title: str, message: str) -> "Notice":
        return cls(level="info", title=title, message=message)

    @classmethod
    def warning(cls, title: str, message: str) -> "Notice":
        return cls(level="warning", title=title, message=message)

    @classmethod
    def error(cls, title: str, message: str) -> "Notice":
        return cls(level="error", title=title, message=message)
