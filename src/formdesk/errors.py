from __future__ import annotations


class FormdeskError(Exception):
    """Base class for domain errors raised below the route layer."""


class FormNotFoundError(FormdeskError):
    def __init__(self, form_id: str) -> None:
        super().__init__(f"Form not found: {form_id}")
        self.form_id = form_id


class SubmissionNotFoundError(FormdeskError):
    def __init__(self, submission_id: str) -> None:
        super().__init__(f"Submission not found: {submission_id}")
        self.submission_id = submission_id


class FormUnavailableError(FormdeskError):
    """The form exists but does not accept submissions."""

    def __init__(self, form_id: str, reason: str) -> None:
        super().__init__(reason)
        self.form_id = form_id
        self.reason = reason


class ValidationFailedError(FormdeskError):
    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("Validation failed")
        self.errors = errors


class InvalidFormError(FormdeskError):
    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages))
        self.messages = messages


class PersistenceError(FormdeskError):
    """The storage backend failed while saving or loading data."""
