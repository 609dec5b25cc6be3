"""Organization-scoped administration: statistics, bulk enrollment and user removal."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from classquiz.constants.storage_constants import (
    ATTEMPTS_KEY,
    DEFAULT_IMPORT_PASSWORD,
    STUDENT_ARCHIVES_KEY,
)
from classquiz.core.identifiers import new_id
from classquiz.core.models import ClassRoom, Quiz, QuizAttempt, StudentArchive, User, UserRole
from classquiz.core.schemas import CsvStudentRow
from classquiz.core.services.class_service import ClassService
from classquiz.core.services.quiz_service import QuizService
from classquiz.core.services.user_service import UserService
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SystemStats:
    total_teachers: int
    total_students: int
    total_classes: int
    total_quizzes: int


@dataclass(slots=True)
class DeletedContent:
    """Recycle bin contents."""

    classes: list[ClassRoom] = field(default_factory=list)
    quizzes: list[Quiz] = field(default_factory=list)


@dataclass(slots=True)
class CsvImportResult:
    added: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class DeleteUserResult:
    success: bool
    message: str


class AdminService:
    def __init__(
        self,
        store: CollectionStore,
        users: UserService,
        classes: ClassService,
        quizzes: QuizService,
    ) -> None:
        self._store = store
        self._users = users
        self._classes = classes
        self._quizzes = quizzes

    def get_system_stats(self, organization_id: str) -> SystemStats:
        users = self._users.get_by_organization(organization_id)
        return SystemStats(
            total_teachers=sum(1 for u in users if u.role is UserRole.TEACHER),
            total_students=sum(1 for u in users if u.role is UserRole.STUDENT),
            total_classes=len(self._classes.get_by_organization(organization_id)),
            total_quizzes=len(self._quizzes.get_by_organization(organization_id)),
        )

    # --- Recycle bins ---

    def get_deleted_content(self, teacher_id: str) -> DeletedContent:
        return DeletedContent(
            classes=self._classes.get_deleted_by_teacher(teacher_id),
            quizzes=self._quizzes.get_deleted_by_teacher(teacher_id),
        )

    def get_system_wide_deleted_content(self, organization_id: str) -> DeletedContent:
        return DeletedContent(
            classes=self._classes.get_deleted_by_organization(organization_id),
            quizzes=self._quizzes.get_deleted_by_organization(organization_id),
        )

    def _purge(self, content: DeletedContent) -> None:
        for classroom in content.classes:
            self._classes.permanently_delete(classroom.id)
        for quiz in content.quizzes:
            self._quizzes.permanently_delete(quiz.id)

    def empty_recycle_bin(self, teacher_id: str) -> None:
        self._purge(self.get_deleted_content(teacher_id))

    def empty_system_wide_recycle_bin(self, organization_id: str) -> None:
        self._purge(self.get_system_wide_deleted_content(organization_id))

    # --- Bulk enrollment ---

    def add_students_from_csv(self, class_id: str, rows: list[CsvStudentRow]) -> CsvImportResult:
        """Reconcile roster rows with existing users and enroll them in the class.

        Each row is handled independently: a row error is recorded and the
        remaining rows are still processed.
        """
        classes = self._classes.load_all()
        classroom = next((c for c in classes if c.id == class_id), None)
        if classroom is None:
            return CsvImportResult(errors=["Class not found."])

        users = self._users.load_all()
        by_email = {u.email.lower(): u for u in users}
        default_hash: str | None = None
        result = CsvImportResult()

        for row in rows:
            if not row.email or not row.first_name or not row.last_name:
                result.errors.append(f"Skipping row with missing data: {row.model_dump_json()}")
                continue

            student = by_email.get(row.email.lower())
            if student is None:
                if default_hash is None:
                    default_hash = self._users.hash_password(DEFAULT_IMPORT_PASSWORD)
                student = User(
                    id=new_id("user"),
                    email=row.email,
                    role=UserRole.STUDENT,
                    first_name=row.first_name,
                    middle_name=row.middle_name,
                    last_name=row.last_name,
                    organization_id=classroom.organization_id,
                    password_hash=default_hash,
                )
                users.append(student)
                by_email[row.email.lower()] = student
                logger.info("Created student %s from roster import", student.id)

            if student.role is not UserRole.STUDENT:
                result.errors.append(f"User with email {row.email} is not a student.")
                continue
            if student.organization_id != classroom.organization_id:
                result.errors.append(f"Student {row.email} belongs to a different organization.")
                continue

            if student.id in classroom.student_ids:
                result.skipped += 1
                continue
            classroom.student_ids.append(student.id)
            if class_id not in student.class_ids:
                student.class_ids.append(class_id)
            result.added += 1

        self._users.save_all(users)
        self._classes.save_all(classes)
        self._users.touch_activity(classroom.teacher_id)
        logger.info(
            "Roster import into %s: %d added, %d skipped, %d errors",
            class_id,
            result.added,
            result.skipped,
            len(result.errors),
        )
        return result

    # --- User removal ---

    def delete_user(self, user_id: str, performing_admin_id: str) -> DeleteUserResult:
        users = self._users.load_all()
        target = next((u for u in users if u.id == user_id), None)
        admin = next((u for u in users if u.id == performing_admin_id), None)

        if target is None:
            return DeleteUserResult(False, "User not found.")
        if admin is None or admin.role is not UserRole.ADMIN:
            return DeleteUserResult(False, "Invalid admin credentials.")
        if target.id == admin.id:
            return DeleteUserResult(False, "Admins cannot delete their own account.")
        if target.role is UserRole.ADMIN:
            return DeleteUserResult(False, "Admins cannot delete other admin accounts.")
        if target.organization_id != admin.organization_id:
            return DeleteUserResult(False, "User belongs to a different organization.")

        if target.role is UserRole.TEACHER and (
            self._classes.has_active_content(user_id) or self._quizzes.has_active_content(user_id)
        ):
            logger.warning("Refused to delete teacher %s with active content", user_id)
            return DeleteUserResult(
                False,
                "Cannot delete teacher. They are assigned to active (non-archived) classes or quizzes. "
                "Please reassign or delete the content first.",
            )

        if target.role is UserRole.STUDENT:
            classes = self._classes.load_all()
            for classroom in classes:
                if user_id in classroom.student_ids:
                    classroom.student_ids.remove(user_id)
            self._classes.save_all(classes)

            attempts = self._store.load(ATTEMPTS_KEY, QuizAttempt.from_record)
            self._store.save(ATTEMPTS_KEY, [a for a in attempts if a.student_id != user_id])
            archives = self._store.load(STUDENT_ARCHIVES_KEY, StudentArchive.from_record)
            self._store.save(STUDENT_ARCHIVES_KEY, [a for a in archives if a.student_id != user_id])

        self._users.save_all([u for u in users if u.id != user_id])
        logger.info("Admin %s deleted user %s", performing_admin_id, user_id)
        return DeleteUserResult(True, f"User {target.full_name} has been permanently deleted.")
