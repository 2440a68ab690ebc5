from __future__ import annotations

from typing import Any, Protocol


class FormRepository(Protocol):
    def list_forms(self) -> list[dict[str, Any]]: ...

    def get_form(self, form_id: str) -> dict[str, Any] | None: ...

    def create_form(self, form: dict[str, Any]) -> dict[str, Any]: ...

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]: ...

    def delete_form(self, form_id: str) -> bool: ...


class SubmissionRepository(Protocol):
    def list_submissions(self, form_id: str | None = None) -> list[dict[str, Any]]: ...

    def get_submission(self, submission_id: str) -> dict[str, Any] | None: ...

    def create_submission(self, submission: dict[str, Any]) -> dict[str, Any]: ...

    def delete_submission(self, submission_id: str) -> bool: ...

    def delete_for_form(self, form_id: str) -> int: ...

    def count_by_form(self) -> dict[str, int]: ...


class Storage(Protocol):
    forms: FormRepository
    submissions: SubmissionRepository
