from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class NotificationLevel(str, Enum):
    success = "success"
    info = "info"
    warning = "warning"
    error = "error"


class Notification(BaseModel):
    level: NotificationLevel
    title: str
    description: str = ""

    @classmethod
    def success(cls, title: str, description: str = "") -> "Notification":
        return cls(level=NotificationLevel.success, title=title, description=description)

    @classmethod
    def info(cls, title: str, description: str = "") -> "Notification":
        return cls(level=NotificationLevel.info, title=title, description=description)

    @classmethod
    def warning(cls, title: str, description: str = "") -> "Notification":
        return cls(level=NotificationLevel.warning, title=title, description=description)

    @classmethod
    def error(cls, title: str, description: str = "") -> "Notification":
        return cls(level=NotificationLevel.error, title=title, description=description)

    @property
    def is_error(self) -> bool:
        return self.level is NotificationLevel.error

    def __str__(self) -> str:
        return f"{self.title}: {self.description}" if self.description else self.title
