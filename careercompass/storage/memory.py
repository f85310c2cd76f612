"""In-memory entity store for profiles, conversations and analyses.

Everything lives in process memory and is lost on restart. The
interface is kept small (see :class:`Storage`) so a database-backed
implementation can be added later without touching the service layer.
"""

from __future__ import annotations

import threading
import uuid
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel

from ..errors import ValidationError
from .schemas import (
    CareerAnalysis,
    ChatMessage,
    Conversation,
    StudentProfile,
    User,
)


RecordT = TypeVar("RecordT", bound=BaseModel)

# Fields a patch may never overwrite.
_IMMUTABLE_FIELDS = {"id", "created_at"}


class EntityTable(Generic[RecordT]):
    """Keyed collection of one record kind.

    Records are kept in insertion order, so ``find_by`` returns the
    earliest matching record. When ``index_field`` is given, the first
    record stored for each value of that field is also indexed for
    direct lookup; later duplicates never replace it.
    """

    def __init__(self, model: Type[RecordT], index_field: Optional[str] = None, lock: Any = None) -> None:
        self._model = model
        self._index_field = index_field
        self._records: Dict[str, RecordT] = {}
        self._index: Dict[str, str] = {}
        self._lock = lock or threading.RLock()

    def _remember(self, record: RecordT) -> None:
        self._records[record.id] = record
        if self._index_field:
            key = getattr(record, self._index_field, None)
            if key is not None:
                self._index.setdefault(key, record.id)

    def create(self, data: Dict[str, Any]) -> RecordT:
        with self._lock:
            record_id = str(uuid.uuid4())
            while record_id in self._records:
                record_id = str(uuid.uuid4())
            payload = {k: v for k, v in data.items() if k not in _IMMUTABLE_FIELDS}
            record = self._model.model_validate({**payload, "id": record_id})
            self._remember(record)
            return record.model_copy(deep=True)

    def get(self, record_id: str) -> Optional[RecordT]:
        with self._lock:
            record = self._records.get(record_id)
            return record.model_copy(deep=True) if record is not None else None

    def update(self, record_id: str, patch: Dict[str, Any]) -> Optional[RecordT]:
        """Shallow-merge ``patch`` over the stored record."""
        with self._lock:
            existing = self._records.get(record_id)
            if existing is None:
                return None
            changes = {k: v for k, v in (patch or {}).items() if k not in _IMMUTABLE_FIELDS}
            updated = existing.model_copy(update=changes, deep=True)
            self._remember(updated)
            return updated.model_copy(deep=True)

    def find_by(self, predicate: Callable[[RecordT], bool]) -> Optional[RecordT]:
        with self._lock:
            for record in self._records.values():
                if predicate(record):
                    return record.model_copy(deep=True)
            return None

    def get_by_index(self, key: str) -> Optional[RecordT]:
        if not self._index_field:
            raise TypeError(f"{self._model.__name__} table has no index")
        with self._lock:
            record_id = self._index.get(key)
            return self.get(record_id) if record_id is not None else None

    def all(self) -> List[RecordT]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)


class Storage(Protocol):
    """Interface expected by :class:`careercompass.service.CareerCompassService`."""

    def create_user(self, username: str, password: str) -> User:  # pragma: no cover - interface only
        ...

    def get_user(self, user_id: str) -> Optional[User]:  # pragma: no cover - interface only
        ...

    def get_user_by_username(self, username: str) -> Optional[User]:  # pragma: no cover - interface only
        ...

    def create_student_profile(self, data: Dict[str, Any]) -> StudentProfile:  # pragma: no cover - interface only
        ...

    def get_student_profile(self, profile_id: str) -> Optional[StudentProfile]:  # pragma: no cover - interface only
        ...

    def update_student_profile(self, profile_id: str, patch: Dict[str, Any]) -> Optional[StudentProfile]:  # pragma: no cover - interface only
        ...

    def create_conversation(self, data: Dict[str, Any]) -> Conversation:  # pragma: no cover - interface only
        ...

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:  # pragma: no cover - interface only
        ...

    def get_conversation_by_profile_id(self, profile_id: str) -> Optional[Conversation]:  # pragma: no cover - interface only
        ...

    def update_conversation(self, conversation_id: str, messages: List[ChatMessage]) -> Optional[Conversation]:  # pragma: no cover - interface only
        ...

    def append_messages(self, conversation_id: str, messages: Iterable[ChatMessage]) -> Optional[Conversation]:  # pragma: no cover - interface only
        ...

    def create_career_analysis(self, data: Dict[str, Any]) -> CareerAnalysis:  # pragma: no cover - interface only
        ...

    def get_career_analysis_by_profile_id(self, profile_id: str) -> Optional[CareerAnalysis]:  # pragma: no cover - interface only
        ...


class MemStorage:
    """Volatile store, one instance per app (or per test)."""

    def __init__(self) -> None:
        # One lock for all tables so cross-table reads see a consistent view.
        self._lock = threading.RLock()
        self.users: EntityTable[User] = EntityTable(User, index_field="username", lock=self._lock)
        self.student_profiles: EntityTable[StudentProfile] = EntityTable(StudentProfile, lock=self._lock)
        self.conversations: EntityTable[Conversation] = EntityTable(
            Conversation, index_field="profile_id", lock=self._lock
        )
        self.career_analyses: EntityTable[CareerAnalysis] = EntityTable(
            CareerAnalysis, index_field="profile_id", lock=self._lock
        )

    # --- users ---

    def create_user(self, username: str, password: str) -> User:
        with self._lock:
            if self.users.get_by_index(username) is not None:
                raise ValidationError("Username already exists")
            return self.users.create({"username": username, "password": password})

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.users.get_by_index(username)

    # --- student profiles ---

    def create_student_profile(self, data: Dict[str, Any]) -> StudentProfile:
        return self.student_profiles.create(data)

    def get_student_profile(self, profile_id: str) -> Optional[StudentProfile]:
        return self.student_profiles.get(profile_id)

    def update_student_profile(self, profile_id: str, patch: Dict[str, Any]) -> Optional[StudentProfile]:
        return self.student_profiles.update(profile_id, patch)

    # --- conversations ---

    def create_conversation(self, data: Dict[str, Any]) -> Conversation:
        return self.conversations.create(data)

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self.conversations.get(conversation_id)

    def get_conversation_by_profile_id(self, profile_id: str) -> Optional[Conversation]:
        return self.conversations.get_by_index(profile_id)

    def update_conversation(self, conversation_id: str, messages: List[ChatMessage]) -> Optional[Conversation]:
        return self.conversations.update(conversation_id, {"messages": list(messages)})

    def append_messages(self, conversation_id: str, messages: Iterable[ChatMessage]) -> Optional[Conversation]:
        """Append to the stored history as one atomic read-modify-write."""
        with self._lock:
            existing = self.conversations.get(conversation_id)
            if existing is None:
                return None
            return self.update_conversation(conversation_id, existing.messages + list(messages))

    # --- career analyses ---

    def create_career_analysis(self, data: Dict[str, Any]) -> CareerAnalysis:
        return self.career_analyses.create(data)

    def get_career_analysis_by_profile_id(self, profile_id: str) -> Optional[CareerAnalysis]:
        return self.career_analyses.get_by_index(profile_id)
