"""Domain models for the classroom quiz store.

Every entity is a plain dataclass that converts to and from the JSON record
kept in its collection. Records use snake_case keys, ISO-8601 timestamps and
enum values as strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class UserRole(str, Enum):
    SUPER_ADMIN = "super-admin"
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class OrganizationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    DRAG_AND_DROP = "drag-and-drop"


class ContentState(str, Enum):
    """Lifecycle of a class or quiz: active, archived, or in the recycle bin."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


def _optional_state(value: str | None) -> ContentState | None:
    return ContentState(value) if value else None


def _dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _dt_from_str(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _int_mapping(raw: dict[Any, Any] | None) -> dict[int, int] | None:
    # JSON object keys are always strings
    if raw is None:
        return None
    return {int(key): int(value) for key, value in raw.items()}


def _str_mapping(mapping: dict[int, int] | None) -> dict[str, int] | None:
    if mapping is None:
        return None
    return {str(key): value for key, value in mapping.items()}


@dataclass(slots=True)
class Organization:
    """Tenant that owns users, classes and quizzes."""

    id: str
    name: str
    code: str
    status: OrganizationStatus = OrganizationStatus.PENDING
    website: str = ""
    mobile: str = ""
    address: str = ""
    country: str = ""

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "status": self.status.value,
            "website": self.website,
            "mobile": self.mobile,
            "address": self.address,
            "country": self.country,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Organization:
        return cls(
            id=record["id"],
            name=record["name"],
            code=record["code"],
            status=OrganizationStatus(record.get("status", "pending")),
            website=record.get("website", ""),
            mobile=record.get("mobile", ""),
            address=record.get("address", ""),
            country=record.get("country", ""),
        )


@dataclass(slots=True)
class User:
    """Account of any role. ``password_hash`` is only populated inside the store."""

    id: str
    email: str
    role: UserRole
    first_name: str
    last_name: str
    middle_name: str = ""
    organization_id: str | None = None
    class_ids: list[str] = field(default_factory=list)
    points: int = 0
    last_activity: datetime | None = None
    password_hash: str | None = field(default=None, repr=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "role": self.role.value,
            "first_name": self.first_name,
            "middle_name": self.middle_name,
            "last_name": self.last_name,
            "organization_id": self.organization_id,
            "last_activity": _dt_to_str(self.last_activity),
            "password_hash": self.password_hash,
        }
        if self.role is UserRole.STUDENT:
            record["class_ids"] = list(self.class_ids)
            record["points"] = self.points
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> User:
        return cls(
            id=record["id"],
            email=record["email"],
            role=UserRole(record["role"]),
            first_name=record.get("first_name", ""),
            middle_name=record.get("middle_name", ""),
            last_name=record.get("last_name", ""),
            organization_id=record.get("organization_id"),
            class_ids=list(record.get("class_ids") or []),
            points=int(record.get("points") or 0),
            last_activity=_dt_from_str(record.get("last_activity")),
            password_hash=record.get("password_hash"),
        )


@dataclass(slots=True)
class ClassRoom:
    """A teacher's class that students join with its code."""

    id: str
    name: str
    teacher_id: str
    organization_id: str
    code: str
    student_ids: list[str] = field(default_factory=list)
    state: ContentState = ContentState.ACTIVE
    # State to return to on restore
    state_before_delete: ContentState | None = None

    @property
    def is_active(self) -> bool:
        return self.state is ContentState.ACTIVE

    @property
    def is_deleted(self) -> bool:
        return self.state is ContentState.DELETED

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "teacher_id": self.teacher_id,
            "organization_id": self.organization_id,
            "code": self.code,
            "student_ids": list(self.student_ids),
            "state": self.state.value,
            "state_before_delete": self.state_before_delete.value if self.state_before_delete else None,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> ClassRoom:
        return cls(
            id=record["id"],
            name=record["name"],
            teacher_id=record["teacher_id"],
            organization_id=record["organization_id"],
            code=record["code"],
            student_ids=list(record.get("student_ids") or []),
            state=ContentState(record.get("state", "active")),
            state_before_delete=_optional_state(record.get("state_before_delete")),
        )


@dataclass(slots=True)
class Question:
    """Quiz question; which fields are meaningful depends on ``type``."""

    id: str
    type: QuestionType
    question_text: str
    options: list[str] = field(default_factory=list)
    correct_answer_index: int | None = None
    items: list[str] = field(default_factory=list)
    targets: list[str] = field(default_factory=list)
    correct_mapping: dict[int, int] | None = None

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "question_text": self.question_text,
        }
        if self.type is QuestionType.DRAG_AND_DROP:
            record["items"] = list(self.items)
            record["targets"] = list(self.targets)
            record["correct_mapping"] = _str_mapping(self.correct_mapping)
        else:
            record["options"] = list(self.options)
            record["correct_answer_index"] = self.correct_answer_index
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Question:
        return cls(
            id=record["id"],
            type=QuestionType(record["type"]),
            question_text=record.get("question_text", ""),
            options=list(record.get("options") or []),
            correct_answer_index=record.get("correct_answer_index"),
            items=list(record.get("items") or []),
            targets=list(record.get("targets") or []),
            correct_mapping=_int_mapping(record.get("correct_mapping")),
        )


@dataclass(slots=True)
class Quiz:
    id: str
    teacher_id: str
    organization_id: str
    title: str
    questions: list[Question] = field(default_factory=list)
    state: ContentState = ContentState.ACTIVE
    # State to return to on restore
    state_before_delete: ContentState | None = None

    @property
    def is_active(self) -> bool:
        return self.state is ContentState.ACTIVE

    @property
    def is_deleted(self) -> bool:
        return self.state is ContentState.DELETED

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "teacher_id": self.teacher_id,
            "organization_id": self.organization_id,
            "title": self.title,
            "questions": [question.to_record() for question in self.questions],
            "state": self.state.value,
            "state_before_delete": self.state_before_delete.value if self.state_before_delete else None,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Quiz:
        return cls(
            id=record["id"],
            teacher_id=record["teacher_id"],
            organization_id=record["organization_id"],
            title=record["title"],
            questions=[Question.from_record(item) for item in record.get("questions") or []],
            state=ContentState(record.get("state", "active")),
            state_before_delete=_optional_state(record.get("state_before_delete")),
        )


@dataclass(slots=True)
class Assignment:
    """Makes a quiz available to a class from ``available_from`` onwards."""

    id: str
    quiz_id: str
    class_id: str
    available_from: datetime

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "class_id": self.class_id,
            "available_from": _dt_to_str(self.available_from),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Assignment:
        return cls(
            id=record["id"],
            quiz_id=record["quiz_id"],
            class_id=record["class_id"],
            available_from=_dt_from_str(record["available_from"]),
        )


@dataclass(slots=True)
class AnswerRecord:
    """A student's answer to one question of an attempt."""

    question_id: str
    is_correct: bool = False
    selected_option_index: int | None = None
    mapping: dict[int, int] | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "is_correct": self.is_correct,
            "selected_option_index": self.selected_option_index,
            "mapping": _str_mapping(self.mapping),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> AnswerRecord:
        return cls(
            question_id=record["question_id"],
            is_correct=bool(record.get("is_correct", False)),
            selected_option_index=record.get("selected_option_index"),
            mapping=_int_mapping(record.get("mapping")),
        )


@dataclass(slots=True)
class QuizAttempt:
    id: str
    quiz_id: str
    student_id: str
    organization_id: str
    answers: list[AnswerRecord]
    score: int
    max_score: int
    completed_at: datetime

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "student_id": self.student_id,
            "organization_id": self.organization_id,
            "answers": [answer.to_record() for answer in self.answers],
            "score": self.score,
            "max_score": self.max_score,
            "completed_at": _dt_to_str(self.completed_at),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> QuizAttempt:
        return cls(
            id=record["id"],
            quiz_id=record["quiz_id"],
            student_id=record["student_id"],
            organization_id=record["organization_id"],
            answers=[AnswerRecord.from_record(item) for item in record.get("answers") or []],
            score=int(record.get("score", 0)),
            max_score=int(record.get("max_score", 0)),
            completed_at=_dt_from_str(record["completed_at"]),
        )


@dataclass(slots=True)
class Notification:
    id: str
    user_id: str
    title: str
    message: str
    created_at: datetime
    link: str | None = None
    is_read: bool = False

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "link": self.link,
            "is_read": self.is_read,
            "created_at": _dt_to_str(self.created_at),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Notification:
        return cls(
            id=record["id"],
            user_id=record["user_id"],
            title=record["title"],
            message=record["message"],
            link=record.get("link"),
            is_read=bool(record.get("is_read", False)),
            created_at=_dt_from_str(record["created_at"]),
        )


@dataclass(slots=True)
class StudentArchive:
    """A student's personal hide toggle for one quiz."""

    student_id: str
    quiz_id: str

    def to_record(self) -> dict[str, Any]:
        return {"student_id": self.student_id, "quiz_id": self.quiz_id}

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> StudentArchive:
        return cls(student_id=record["student_id"], quiz_id=record["quiz_id"])
