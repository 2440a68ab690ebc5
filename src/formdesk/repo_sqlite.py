from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, func
from sqlalchemy.orm import Session, sessionmaker

from formdesk.models import Base, FormFieldModel, FormModel, SubmissionModel
from formdesk.utils import dumps_json, loads_json, now_utc


class SQLiteFormRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_forms(self) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = session.query(FormModel).order_by(FormModel.created_at.desc()).all()
            return [self._to_dict(session, row) for row in rows]

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            return self._to_dict(session, row) if row else None

    def create_form(self, form: dict[str, Any]) -> dict[str, Any]:
        with self._Session() as session:
            row = FormModel(
                id=form["id"],
                title=form["title"],
                description=form.get("description", ""),
                owner_name=form.get("owner_name", ""),
                is_published=bool(form.get("is_published", False)),
                is_active=bool(form.get("is_active", True)),
                published_at=form.get("published_at"),
                created_at=form["created_at"],
                updated_at=form["updated_at"],
            )
            session.add(row)
            self._write_fields(session, form["id"], form.get("fields") or [])
            session.commit()
            return self._to_dict(session, row)

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if not row:
                raise KeyError(form_id)
            for key, value in updates.items():
                if key == "fields":
                    session.query(FormFieldModel).filter(
                        FormFieldModel.form_id == form_id
                    ).delete()
                    self._write_fields(session, form_id, value or [])
                elif key != "id":
                    setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return self._to_dict(session, row)

    def delete_form(self, form_id: str) -> bool:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if not row:
                return False
            session.query(FormFieldModel).filter(FormFieldModel.form_id == form_id).delete()
            session.query(SubmissionModel).filter(SubmissionModel.form_id == form_id).delete()
            session.delete(row)
            session.commit()
            return True

    @staticmethod
    def _write_fields(session: Session, form_id: str, fields: list[dict[str, Any]]) -> None:
        for index, field in enumerate(fields):
            options = field.get("options")
            session.add(
                FormFieldModel(
                    form_id=form_id,
                    field_id=field["id"],
                    type=field["type"],
                    label=field.get("label", ""),
                    required=bool(field.get("required", False)),
                    placeholder=field.get("placeholder") or "",
                    options=dumps_json(options) if options is not None else None,
                    order=index,
                )
            )

    @staticmethod
    def _to_dict(session: Session, row: FormModel) -> dict[str, Any]:
        field_rows = (
            session.query(FormFieldModel)
            .filter(FormFieldModel.form_id == row.id)
            .order_by(FormFieldModel.order.asc(), FormFieldModel.pk.asc())
            .all()
        )
        fields: list[dict[str, Any]] = []
        for field_row in field_rows:
            field: dict[str, Any] = {
                "id": field_row.field_id,
                "type": field_row.type,
                "label": field_row.label or "",
                "required": bool(field_row.required),
                "placeholder": field_row.placeholder or "",
                "order": field_row.order,
            }
            options = loads_json(field_row.options)
            if options is not None:
                field["options"] = options
            fields.append(field)
        return {
            "id": row.id,
            "title": row.title or "",
            "description": row.description or "",
            "owner_name": row.owner_name or "",
            "fields": fields,
            "is_published": bool(row.is_published),
            "is_active": bool(row.is_active),
            "published_at": row.published_at,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }


class SQLiteSubmissionRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_submissions(self, form_id: str | None = None) -> list[dict[str, Any]]:
        with self._Session() as session:
            query = session.query(SubmissionModel)
            if form_id is not None:
                query = query.filter(SubmissionModel.form_id == form_id)
            rows = query.order_by(SubmissionModel.created_at.desc()).all()
            return [self._to_dict(row) for row in rows]

    def get_submission(self, submission_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(SubmissionModel, submission_id)
            return self._to_dict(row) if row else None

    def create_submission(self, submission: dict[str, Any]) -> dict[str, Any]:
        with self._Session() as session:
            row = SubmissionModel(
                id=submission["id"],
                form_id=submission["form_id"],
                submitter_name=submission.get("submitter_name"),
                data=submission["data"],
                created_at=submission.get("created_at") or now_utc(),
            )
            session.add(row)
            session.commit()
            return self._to_dict(row)

    def delete_submission(self, submission_id: str) -> bool:
        with self._Session() as session:
            row = session.get(SubmissionModel, submission_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def delete_for_form(self, form_id: str) -> int:
        with self._Session() as session:
            count = (
                session.query(SubmissionModel)
                .filter(SubmissionModel.form_id == form_id)
                .delete()
            )
            session.commit()
            return count

    def count_by_form(self) -> dict[str, int]:
        with self._Session() as session:
            rows = (
                session.query(SubmissionModel.form_id, func.count(SubmissionModel.id))
                .group_by(SubmissionModel.form_id)
                .all()
            )
            return {form_id: count for form_id, count in rows}

    @staticmethod
    def _to_dict(row: SubmissionModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "form_id": row.form_id,
            "submitter_name": row.submitter_name,
            "data": row.data or "",
            "created_at": row.created_at,
        }


class SQLiteStorage:
    def __init__(self, db_path: Path) -> None:
        self._engine = create_engine(f"sqlite:///{db_path}", future=True)
        self._Session = sessionmaker(self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)
        self.forms = SQLiteFormRepo(self._Session)
        self.submissions = SQLiteSubmissionRepo(self._Session)
