from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from filelock import FileLock
from tinydb import Query, TinyDB

from formdesk.utils import now_utc, parse_dt, to_iso

_DATETIME_KEYS = {"published_at", "created_at", "updated_at"}


class JSONRepoBase:
    def __init__(self, path: Path, lock: FileLock) -> None:
        self._path = path
        self._lock = lock

    @contextmanager
    def _db(self) -> Iterator[TinyDB]:
        with self._lock:
            db = TinyDB(self._path)
            try:
                yield db
            finally:
                db.close()


class JSONFormRepo(JSONRepoBase):
    def list_forms(self) -> list[dict[str, Any]]:
        with self._db() as db:
            items = db.table("forms").all()
        forms = [self._from_record(item) for item in items]
        return sorted(forms, key=lambda x: x["created_at"] or now_utc(), reverse=True)

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("forms").get(Query().id == form_id)
        return self._from_record(item) if item else None

    def create_form(self, form: dict[str, Any]) -> dict[str, Any]:
        record = self._to_record(form)
        record["fields"] = self._number_fields(form.get("fields") or [])
        record.setdefault("is_published", False)
        record.setdefault("is_active", True)
        record.setdefault("published_at", None)
        with self._db() as db:
            db.table("forms").insert(record)
        return self._from_record(record)

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._db() as db:
            table = db.table("forms")
            item = table.get(Query().id == form_id)
            if not item:
                raise KeyError(form_id)
            record = dict(item)
            changes = {k: v for k, v in updates.items() if k != "id"}
            if "fields" in changes:
                changes["fields"] = self._number_fields(changes["fields"] or [])
            record.update(self._to_record(changes))
            table.update(record, Query().id == form_id)
        return self._from_record(record)

    def delete_form(self, form_id: str) -> bool:
        with self._db() as db:
            forms = db.table("forms")
            removed = forms.remove(Query().id == form_id)
            if removed:
                db.table("submissions").remove(Query().form_id == form_id)
        return bool(removed)

    @staticmethod
    def _number_fields(fields: list[dict[str, Any]]) -> list[dict[str, Any]]:
        numbered: list[dict[str, Any]] = []
        for index, field in enumerate(fields):
            entry = {
                "id": field["id"],
                "type": field["type"],
                "label": field.get("label", ""),
                "required": bool(field.get("required", False)),
                "placeholder": field.get("placeholder") or "",
                "order": index,
            }
            if field.get("options") is not None:
                entry["options"] = list(field["options"])
            numbered.append(entry)
        return numbered

    @staticmethod
    def _to_record(form: dict[str, Any]) -> dict[str, Any]:
        record: dict[str, Any] = {}
        for key, value in form.items():
            if key in _DATETIME_KEYS:
                record[key] = to_iso(value) if isinstance(value, datetime) else value
            else:
                record[key] = value
        return record

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": record["id"],
            "title": record.get("title", ""),
            "description": record.get("description", ""),
            "owner_name": record.get("owner_name", ""),
            "fields": [dict(field) for field in record.get("fields", [])],
            "is_published": bool(record.get("is_published", False)),
            "is_active": bool(record.get("is_active", True)),
            "published_at": parse_dt(record.get("published_at")),
            "created_at": parse_dt(record.get("created_at")),
            "updated_at": parse_dt(record.get("updated_at")),
        }


class JSONSubmissionRepo(JSONRepoBase):
    def list_submissions(self, form_id: str | None = None) -> list[dict[str, Any]]:
        with self._db() as db:
            table = db.table("submissions")
            if form_id is None:
                items = table.all()
            else:
                items = table.search(Query().form_id == form_id)
        submissions = [self._from_record(item) for item in items]
        return sorted(submissions, key=lambda x: x["created_at"] or now_utc(), reverse=True)

    def get_submission(self, submission_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("submissions").get(Query().id == submission_id)
        return self._from_record(item) if item else None

    def create_submission(self, submission: dict[str, Any]) -> dict[str, Any]:
        record = self._to_record(submission)
        with self._db() as db:
            db.table("submissions").insert(record)
        return self._from_record(record)

    def delete_submission(self, submission_id: str) -> bool:
        with self._db() as db:
            removed = db.table("submissions").remove(Query().id == submission_id)
        return bool(removed)

    def delete_for_form(self, form_id: str) -> int:
        with self._db() as db:
            removed = db.table("submissions").remove(Query().form_id == form_id)
        return len(removed)

    def count_by_form(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        with self._db() as db:
            for item in db.table("submissions").all():
                counts[item["form_id"]] = counts.get(item["form_id"], 0) + 1
        return counts

    @staticmethod
    def _to_record(submission: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": submission["id"],
            "form_id": submission["form_id"],
            "submitter_name": submission.get("submitter_name"),
            "data": submission["data"],
            "created_at": to_iso(submission.get("created_at") or now_utc()),
        }

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": record["id"],
            "form_id": record["form_id"],
            "submitter_name": record.get("submitter_name"),
            "data": record.get("data", ""),
            "created_at": parse_dt(record.get("created_at")),
        }


class JSONStorage:
    def __init__(self, path: Path) -> None:
        self._lock = FileLock(f"{path}.lock")
        self.forms = JSONFormRepo(path, self._lock)
        self.submissions = JSONSubmissionRepo(path, self._lock)
