"""Repository facade exposing every classroom quiz operation to the UI layer."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Mapping, Sequence, TypeVar

from pydantic import BaseModel, TypeAdapter

from classquiz.core.csv_importer import load_student_csv, parse_student_csv
from classquiz.core.models import (
    Assignment,
    ClassRoom,
    Notification,
    Organization,
    Quiz,
    QuizAttempt,
    User,
)
from classquiz.core.schemas import (
    AttemptSubmission,
    CsvStudentRow,
    NewUser,
    OrganizationRegistration,
    QuestionDraft,
)
from classquiz.core.security import PasswordHasher
from classquiz.core.services.admin_service import (
    AdminService,
    CsvImportResult,
    DeletedContent,
    DeleteUserResult,
    SystemStats,
)
from classquiz.core.services.assignment_service import AssignmentService, StudentQuiz
from classquiz.core.services.attempt_service import AttemptService
from classquiz.core.services.class_service import ClassService, JoinResult
from classquiz.core.services.leaderboard import Leaderboard, LeaderboardRow
from classquiz.core.services.notification_service import NotificationService
from classquiz.core.services.organization_service import OrganizationService
from classquiz.core.services.quiz_service import QuizService
from classquiz.core.services.user_service import UserService
from classquiz.core.store import CollectionStore

DraftInput = QuestionDraft | Mapping[str, Any]


ModelT = TypeVar("ModelT", bound=BaseModel)

# Accepts datetimes, ISO strings and epoch seconds or milliseconds
_timestamp = TypeAdapter(datetime)


def _validated(model: type[ModelT], data: ModelT | Mapping[str, Any]) -> ModelT:
    """Accept either a payload model or a plain mapping validated into one."""
    return data if isinstance(data, model) else model.model_validate(data)


class ClassroomRepository:
    """Facade over the per-entity services.

    Every public method runs under one lock, so each call is a single
    read-modify-write of the underlying collections within this process.
    """

    def __init__(self, store: CollectionStore, hasher: PasswordHasher | None = None) -> None:
        self._lock = Lock()
        self._store = store

        # Services
        self._notifications = NotificationService(store)
        self._users = UserService(store, hasher or PasswordHasher())
        self._organizations = OrganizationService(store, self._users, self._notifications)
        self._classes = ClassService(store, self._users, self._notifications)
        self._quizzes = QuizService(store, self._users, self._notifications)
        self._assignments = AssignmentService(
            store, self._users, self._classes, self._quizzes, self._notifications
        )
        self._attempts = AttemptService(store, self._users, self._quizzes, self._notifications)
        self._admin = AdminService(store, self._users, self._classes, self._quizzes)
        self._leaderboard = Leaderboard(self._users, self._attempts)

    # --- Notifications ---

    def get_notifications_for_user(self, user_id: str) -> list[Notification]:
        with self._lock:
            return self._notifications.get_for_user(user_id)

    def mark_notification_as_read(self, notification_id: str, user_id: str) -> None:
        with self._lock:
            self._notifications.mark_as_read(notification_id, user_id)

    def mark_all_notifications_as_read(self, user_id: str) -> None:
        with self._lock:
            self._notifications.mark_all_as_read(user_id)

    # --- Organizations ---

    def get_all_organizations(self) -> list[Organization]:
        with self._lock:
            return self._organizations.get_all()

    def get_pending_organizations(self) -> list[Organization]:
        with self._lock:
            return self._organizations.get_pending()

    def approve_organization(self, organization_id: str) -> Organization | None:
        with self._lock:
            return self._organizations.approve(organization_id)

    def reject_organization(self, organization_id: str) -> Organization | None:
        with self._lock:
            return self._organizations.reject(organization_id)

    def delete_organization(self, organization_id: str) -> None:
        with self._lock:
            self._organizations.delete(organization_id)

    def create_organization(self, data: OrganizationRegistration | Mapping[str, Any]) -> Organization:
        registration = _validated(OrganizationRegistration, data)
        with self._lock:
            return self._organizations.create(registration)

    def get_organization_by_code(self, code: str) -> Organization | None:
        with self._lock:
            return self._organizations.get_by_code(code)

    def get_organization_by_id(self, organization_id: str) -> Organization | None:
        with self._lock:
            return self._organizations.get_by_id(organization_id)

    # --- Users ---

    def verify_user(self, email: str, password: str) -> User | None:
        with self._lock:
            return self._users.verify(email, password)

    def get_user_by_email(self, email: str) -> User | None:
        with self._lock:
            return self._users.get_by_email(email)

    def get_user_by_id(self, user_id: str) -> User | None:
        with self._lock:
            return self._users.get_by_id(user_id)

    def create_user(self, data: NewUser | Mapping[str, Any], password: str) -> User:
        new_user = _validated(NewUser, data)
        with self._lock:
            return self._users.create(new_user, password)

    # --- Teacher authoring ---

    def get_classes_by_teacher(self, teacher_id: str) -> list[ClassRoom]:
        with self._lock:
            return self._classes.get_by_teacher(teacher_id)

    def get_quizzes_by_teacher(self, teacher_id: str) -> list[Quiz]:
        with self._lock:
            return self._quizzes.get_by_teacher(teacher_id)

    def create_class(self, name: str, teacher_id: str) -> ClassRoom:
        with self._lock:
            return self._classes.create(name, teacher_id)

    def create_quiz(self, teacher_id: str, title: str, questions: Sequence[DraftInput]) -> Quiz:
        drafts = [_validated(QuestionDraft, q) for q in questions]
        with self._lock:
            return self._quizzes.create(teacher_id, title, drafts)

    def assign_quiz_to_class(
        self,
        quiz_id: str,
        class_id: str,
        available_from: datetime | int | float | str,
    ) -> Assignment | None:
        starts = _timestamp.validate_python(available_from)
        with self._lock:
            return self._assignments.assign(quiz_id, class_id, starts)

    def update_class(self, class_id: str, new_name: str) -> ClassRoom | None:
        with self._lock:
            return self._classes.rename(class_id, new_name)

    def update_quiz(self, quiz_id: str, title: str, questions: Sequence[DraftInput]) -> Quiz | None:
        drafts = [_validated(QuestionDraft, q) for q in questions]
        with self._lock:
            return self._quizzes.update(quiz_id, title, drafts)

    def duplicate_quiz(self, quiz_id: str) -> Quiz | None:
        with self._lock:
            return self._quizzes.duplicate(quiz_id)

    def archive_class(self, class_id: str, archive: bool) -> ClassRoom | None:
        with self._lock:
            return self._classes.archive(class_id, archive)

    def archive_quiz(self, quiz_id: str, archive: bool) -> Quiz | None:
        with self._lock:
            return self._quizzes.archive(quiz_id, archive)

    def delete_class(self, class_id: str) -> ClassRoom | None:
        with self._lock:
            return self._classes.soft_delete(class_id)

    def delete_quiz(self, quiz_id: str) -> Quiz | None:
        with self._lock:
            return self._quizzes.soft_delete(quiz_id)

    def restore_class(self, class_id: str) -> ClassRoom | None:
        with self._lock:
            return self._classes.restore(class_id)

    def restore_quiz(self, quiz_id: str) -> Quiz | None:
        with self._lock:
            return self._quizzes.restore(quiz_id)

    def permanently_delete_class(self, class_id: str) -> None:
        with self._lock:
            self._classes.permanently_delete(class_id)

    def permanently_delete_quiz(self, quiz_id: str) -> None:
        with self._lock:
            self._quizzes.permanently_delete(quiz_id)

    def get_deleted_content(self, teacher_id: str) -> DeletedContent:
        with self._lock:
            return self._admin.get_deleted_content(teacher_id)

    def empty_recycle_bin(self, teacher_id: str) -> None:
        with self._lock:
            self._admin.empty_recycle_bin(teacher_id)

    # --- Students ---

    def join_class(self, code: str, student_id: str) -> JoinResult:
        with self._lock:
            return self._classes.join(code, student_id)

    def get_quizzes_for_student(self, student_id: str) -> list[StudentQuiz]:
        with self._lock:
            return self._assignments.get_quizzes_for_student(student_id)

    def toggle_archive_for_student(self, student_id: str, quiz_id: str) -> bool:
        with self._lock:
            return self._quizzes.toggle_student_archive(student_id, quiz_id)

    def get_student_archived_quiz_ids(self, student_id: str) -> list[str]:
        with self._lock:
            return self._quizzes.get_student_archived_quiz_ids(student_id)

    # --- Attempts ---

    def save_quiz_attempt(self, submission: AttemptSubmission | Mapping[str, Any]) -> QuizAttempt:
        attempt = _validated(AttemptSubmission, submission)
        with self._lock:
            return self._attempts.save(attempt)

    def get_attempts_by_student(self, student_id: str) -> list[QuizAttempt]:
        with self._lock:
            return self._attempts.get_by_student(student_id)

    def get_attempts_by_quiz(self, quiz_id: str) -> list[QuizAttempt]:
        with self._lock:
            return self._attempts.get_by_quiz(quiz_id)

    def get_attempt_by_id(self, attempt_id: str) -> QuizAttempt | None:
        with self._lock:
            return self._attempts.get_by_id(attempt_id)

    def get_leaderboard(self, organization_id: str, limit: int = 10) -> list[LeaderboardRow]:
        with self._lock:
            return self._leaderboard.get_top_students(organization_id, limit)

    # --- Admin (scoped to an organization) ---

    def get_system_stats(self, organization_id: str) -> SystemStats:
        with self._lock:
            return self._admin.get_system_stats(organization_id)

    def get_all_classes(self, organization_id: str) -> list[ClassRoom]:
        with self._lock:
            return self._classes.get_by_organization(organization_id)

    def get_all_quizzes(self, organization_id: str) -> list[Quiz]:
        with self._lock:
            return self._quizzes.get_by_organization(organization_id)

    def get_all_users(self, organization_id: str) -> list[User]:
        with self._lock:
            return self._users.get_by_organization(organization_id)

    def get_all_attempts(self, organization_id: str) -> list[QuizAttempt]:
        with self._lock:
            return self._attempts.get_by_organization(organization_id)

    def add_students_to_class_from_csv(
        self,
        class_id: str,
        rows: Sequence[CsvStudentRow | Mapping[str, Any]],
    ) -> CsvImportResult:
        parsed = [_validated(CsvStudentRow, r) for r in rows]
        with self._lock:
            return self._admin.add_students_from_csv(class_id, parsed)

    def import_roster_text(self, class_id: str, csv_text: str) -> CsvImportResult:
        """Parse CSV roster text and enroll its rows in the class."""
        rows = parse_student_csv(csv_text)
        with self._lock:
            return self._admin.add_students_from_csv(class_id, rows)

    def import_roster_file(self, class_id: str, file_path: Path) -> CsvImportResult:
        """Read a UTF-8 CSV roster file and enroll its rows in the class."""
        rows = load_student_csv(Path(file_path))
        with self._lock:
            return self._admin.add_students_from_csv(class_id, rows)

    def update_class_teacher(self, class_id: str, teacher_id: str) -> ClassRoom | None:
        with self._lock:
            return self._classes.change_teacher(class_id, teacher_id)

    def add_student_to_class(self, class_id: str, student_id: str) -> bool:
        with self._lock:
            return self._classes.add_student(class_id, student_id)

    def remove_student_from_class(self, class_id: str, student_id: str) -> bool:
        with self._lock:
            return self._classes.remove_student(class_id, student_id)

    def get_system_wide_deleted_content(self, organization_id: str) -> DeletedContent:
        with self._lock:
            return self._admin.get_system_wide_deleted_content(organization_id)

    def empty_system_wide_recycle_bin(self, organization_id: str) -> None:
        with self._lock:
            self._admin.empty_system_wide_recycle_bin(organization_id)

    def delete_user(self, user_id: str, performing_admin_id: str) -> DeleteUserResult:
        with self._lock:
            return self._admin.delete_user(user_id, performing_admin_id)

    # --- Unscoped helpers ---

    def get_quiz_by_id(self, quiz_id: str) -> Quiz | None:
        with self._lock:
            return self._quizzes.get_by_id(quiz_id)

    def get_class_by_id(self, class_id: str) -> ClassRoom | None:
        with self._lock:
            return self._classes.get_by_id(class_id)

    def get_assignments_by_class(self, class_id: str) -> list[Assignment]:
        with self._lock:
            return self._assignments.get_by_class(class_id)

    def get_assignments_by_quiz(self, quiz_id: str) -> list[Assignment]:
        with self._lock:
            return self._assignments.get_by_quiz(quiz_id)

    def get_classes_by_ids(self, class_ids: list[str]) -> list[ClassRoom]:
        with self._lock:
            return self._classes.get_by_ids(class_ids)

    def get_students_by_class_id(self, class_id: str) -> list[User]:
        with self._lock:
            return self._classes.get_students(class_id)
