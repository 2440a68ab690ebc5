"""Builder/preview sessions: a value store bound to a storage backend."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Mapping, TypeVar

from formdesk import services
from formdesk.errors import (
    FormdeskError,
    FormUnavailableError,
    InvalidFormError,
    PersistenceError,
    ValidationFailedError,
)
from formdesk.protocols import Storage
from formdesk.schema import check_builder_payload
from formdesk.store import FormValueStore
from formdesk.utils import new_ulid
from formdesk.validation import validate

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save form"
PUBLISH_FAILED_MESSAGE = "Failed to publish form"
SUBMIT_FAILED_MESSAGE = "Failed to submit form. Please try again."

T = TypeVar("T")


class BuilderSession:
    """One user's editing session for a single form.

    ``form_id`` stays ``None`` until the first successful save. Storage calls
    set an in-flight flag first and clear it when the call finishes, whether
    it succeeded or not.
    """

    def __init__(
        self,
        storage: Storage,
        store: FormValueStore | None = None,
        form_id: str | None = None,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or new_ulid()
        self.storage = storage
        self.store = store or FormValueStore()
        self.form_id = form_id
        self.is_saving = False
        self.is_publishing = False
        self.is_published = False
        self.last_error: str | None = None

    @classmethod
    def from_form(cls, storage: Storage, form_id: str) -> BuilderSession:
        form = services.get_form(storage, form_id)
        store = FormValueStore(
            metadata={
                "title": form.get("title"),
                "description": form.get("description"),
                "owner_name": form.get("owner_name"),
            },
            fields=[
                {key: value for key, value in field.items() if key != "order"}
                for field in form.get("fields", [])
            ],
        )
        session = cls(storage, store=store, form_id=form_id)
        session.is_published = bool(form.get("is_published"))
        return session

    def _call_storage(self, action: Callable[[], T], failure_message: str) -> T:
        try:
            return action()
        except FormdeskError:
            raise
        except Exception as exc:
            logger.exception("%s (session %s)", failure_message, self.id)
            self.last_error = failure_message
            raise PersistenceError(failure_message) from exc

    def save(self) -> str:
        """Persist the current definition and return the confirmed form id."""
        payload, errors = check_builder_payload(self.store.to_payload())
        if errors:
            self.last_error = errors[0]
            raise InvalidFormError(errors)

        self.is_saving = True
        self.last_error = None
        try:
            if self.form_id is None:
                form = self._call_storage(
                    lambda: services.create_form(self.storage, payload),
                    SAVE_FAILED_MESSAGE,
                )
            else:
                form_id = self.form_id
                form = self._call_storage(
                    lambda: services.update_form(self.storage, form_id, payload),
                    SAVE_FAILED_MESSAGE,
                )
        finally:
            self.is_saving = False
        self.form_id = form["id"]
        return form["id"]

    def publish(self, is_published: bool = True) -> dict[str, Any]:
        """Publish the form, saving it first when it has never been stored.

        The id used for publishing is the one ``save`` returned, so the
        publish call never races an unfinished save.
        """
        self.is_publishing = True
        self.last_error = None
        try:
            form_id = self.form_id if self.form_id is not None else self.save()
            form = self._call_storage(
                lambda: services.set_published(self.storage, form_id, is_published),
                PUBLISH_FAILED_MESSAGE,
            )
        finally:
            self.is_publishing = False
        self.is_published = bool(form.get("is_published"))
        return form

    def submit(self, submitter_name: str | None = None) -> bool:
        """Validate the preview values and, for a saved form, store them.

        Returns ``True`` when the submission was accepted. Without a saved
        form the submission is only validated, as in a preview.
        """
        store = self.store
        errors = validate(store.fields, store.values)
        store.set_errors(errors)
        if errors:
            return False

        if self.form_id is None:
            store.reset_values_only()
            store.is_submitted = True
            return True

        values = dict(store.values)
        form_id = self.form_id
        store.is_submitting = True
        store.submit_error = None
        try:
            services.submit(self.storage, form_id, values, submitter_name)
        except ValidationFailedError as exc:
            store.set_errors(exc.errors)
            return False
        except FormUnavailableError as exc:
            store.submit_error = exc.reason
            return False
        except FormdeskError as exc:
            store.submit_error = str(exc)
            return False
        except Exception:
            logger.exception("Submission failed for form %s", form_id)
            store.submit_error = SUBMIT_FAILED_MESSAGE
            return False
        finally:
            store.is_submitting = False

        store.reset_values_only()
        store.is_submitted = True
        return True

    def snapshot(self) -> dict[str, Any]:
        return {
            "session_id": self.id,
            "form_id": self.form_id,
            "is_saving": self.is_saving,
            "is_publishing": self.is_publishing,
            "is_published": self.is_published,
            "last_error": self.last_error,
            **self.store.snapshot(),
        }


class SessionRegistry:
    """Builder sessions of one application instance, keyed by session id.

    A session idle for longer than ``ttl_seconds`` is dropped the next time
    the registry is used. Once ``max_sessions`` are open, opening another one
    drops the least recently used session.
    """

    def __init__(
        self,
        storage: Storage,
        max_sessions: int = 500,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._storage = storage
        self._max_sessions = max(1, max_sessions)
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        # Ordered from least to most recently used.
        self._sessions: OrderedDict[str, BuilderSession] = OrderedDict()
        self._last_used: dict[str, float] = {}

    def _touch(self, session_id: str) -> None:
        self._sessions.move_to_end(session_id)
        self._last_used[session_id] = self._clock()

    def _expire(self) -> None:
        cutoff = self._clock() - self._ttl_seconds
        expired = [sid for sid, used in self._last_used.items() if used < cutoff]
        for session_id in expired:
            self.close(session_id)
        if expired:
            logger.debug("Expired %d idle builder sessions", len(expired))

    def create(
        self, form_id: str | None = None, metadata: Mapping[str, Any] | None = None
    ) -> BuilderSession:
        if form_id is None:
            session = BuilderSession(self._storage)
        else:
            session = BuilderSession.from_form(self._storage, form_id)
        if metadata:
            session.store.update_metadata(metadata)

        self._expire()
        while len(self._sessions) >= self._max_sessions:
            oldest = next(iter(self._sessions))
            self.close(oldest)
            logger.info("Dropped least recently used builder session %s", oldest)
        self._sessions[session.id] = session
        self._touch(session.id)
        logger.debug("Opened builder session %s", session.id)
        return session

    def get(self, session_id: str) -> BuilderSession | None:
        self._expire()
        session = self._sessions.get(session_id)
        if session is not None:
            self._touch(session_id)
        return session

    def close(self, session_id: str) -> bool:
        self._last_used.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        self._expire()
        return len(self._sessions)
