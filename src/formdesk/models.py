from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class FormModel(Base):
    __tablename__ = "forms"

    id = Column(String, primary_key=True)
    title = Column(String)
    description = Column(Text)
    owner_name = Column(String)
    is_published = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)


class FormFieldModel(Base):
    __tablename__ = "form_fields"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    form_id = Column(String, index=True)
    field_id = Column(String)
    type = Column(String)
    label = Column(String)
    required = Column(Boolean, default=False)
    placeholder = Column(String, nullable=True)
    options = Column(Text, nullable=True)
    order = Column(Integer, default=0)


class SubmissionModel(Base):
    __tablename__ = "submissions"

    id = Column(String, primary_key=True)
    form_id = Column(String, index=True)
    submitter_name = Column(String, nullable=True)
    data = Column(Text)
    created_at = Column(DateTime)
