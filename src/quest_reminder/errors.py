from __future__ import annotations


class QuestError(Exception):
    pass


class ValidationError(QuestError):
    pass


class BugReportError(QuestError):
    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details
