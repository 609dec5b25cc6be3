"""Service for classes and their student rosters."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable

from classquiz.constants.storage_constants import ASSIGNMENTS_KEY, CLASSES_KEY
from classquiz.core.errors import TeacherContextError
from classquiz.core.identifiers import class_code, new_id
from classquiz.core.models import Assignment, ClassRoom, ContentState, User, UserRole
from classquiz.core.services.notification_service import NotificationService
from classquiz.core.services.user_service import UserService, public_user
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class JoinResult:
    """Outcome of a join attempt; ``classroom`` is None when ``error`` says why."""

    classroom: ClassRoom | None
    error: str | None = None


class ClassService:
    """Teacher-scoped class authoring plus roster membership."""

    def __init__(
        self,
        store: CollectionStore,
        users: UserService,
        notifications: NotificationService,
    ) -> None:
        self._store = store
        self._users = users
        self._notifications = notifications

    def load_all(self) -> list[ClassRoom]:
        return self._store.load(CLASSES_KEY, ClassRoom.from_record)

    def save_all(self, classes: list[ClassRoom]) -> None:
        self._store.save(CLASSES_KEY, classes)

    def _update(self, class_id: str, mutate: Callable[[ClassRoom], bool]) -> ClassRoom | None:
        """Apply ``mutate`` to one class and persist when it reports a change."""
        classes = self.load_all()
        classroom = next((c for c in classes if c.id == class_id), None)
        if classroom is None:
            return None
        if not mutate(classroom):
            return None
        self.save_all(classes)
        return classroom

    # --- Reads ---

    def get_by_id(self, class_id: str) -> ClassRoom | None:
        return next((c for c in self.load_all() if c.id == class_id), None)

    def get_by_ids(self, class_ids: list[str]) -> list[ClassRoom]:
        wanted = set(class_ids)
        return [c for c in self.load_all() if c.id in wanted]

    def get_by_organization(self, organization_id: str) -> list[ClassRoom]:
        return [c for c in self.load_all() if c.organization_id == organization_id]

    def get_by_teacher(self, teacher_id: str) -> list[ClassRoom]:
        teacher = self._users.get_by_id(teacher_id)
        if teacher is None or not teacher.organization_id:
            return []
        return [
            c
            for c in self.load_all()
            if c.teacher_id == teacher_id
            and c.organization_id == teacher.organization_id
            and not c.is_deleted
        ]

    def get_deleted_by_teacher(self, teacher_id: str) -> list[ClassRoom]:
        teacher = self._users.get_by_id(teacher_id)
        if teacher is None or not teacher.organization_id:
            return []
        return [
            c
            for c in self.load_all()
            if c.teacher_id == teacher_id
            and c.organization_id == teacher.organization_id
            and c.is_deleted
        ]

    def get_deleted_by_organization(self, organization_id: str) -> list[ClassRoom]:
        return [c for c in self.load_all() if c.organization_id == organization_id and c.is_deleted]

    def get_students(self, class_id: str) -> list[User]:
        classroom = self.get_by_id(class_id)
        if classroom is None:
            return []
        members = set(classroom.student_ids)
        return [public_user(u) for u in self._users.load_all() if u.id in members]

    def has_active_content(self, teacher_id: str) -> bool:
        return any(c.teacher_id == teacher_id and c.is_active for c in self.load_all())

    # --- Authoring ---

    def create(self, name: str, teacher_id: str) -> ClassRoom:
        teacher = self._users.get_by_id(teacher_id)
        if teacher is None or not teacher.organization_id:
            raise TeacherContextError("Cannot create class: Teacher not found or not in an organization.")

        classes = self.load_all()
        classroom = ClassRoom(
            id=new_id("class"),
            name=name.strip(),
            teacher_id=teacher_id,
            organization_id=teacher.organization_id,
            code=class_code(name, {c.code.upper() for c in classes}),
        )
        classes.append(classroom)
        self.save_all(classes)
        self._users.touch_activity(teacher_id)
        logger.info("Teacher %s created class %s (%s)", teacher_id, classroom.id, classroom.code)

        admin = self._users.find_admin(teacher.organization_id)
        if admin:
            self._notifications.create(
                admin.id,
                "New Class Created",
                f'{teacher.full_name} created a new class: "{classroom.name}".',
                "/admin",
            )
        return classroom

    def rename(self, class_id: str, new_name: str) -> ClassRoom | None:
        def mutate(classroom: ClassRoom) -> bool:
            classroom.name = new_name.strip()
            return True

        classroom = self._update(class_id, mutate)
        if classroom:
            self._users.touch_activity(classroom.teacher_id)
        return classroom

    def archive(self, class_id: str, archive: bool) -> ClassRoom | None:
        def mutate(classroom: ClassRoom) -> bool:
            if classroom.is_deleted:
                return False
            classroom.state = ContentState.ARCHIVED if archive else ContentState.ACTIVE
            return True

        return self._update(class_id, mutate)

    def soft_delete(self, class_id: str) -> ClassRoom | None:
        def mutate(classroom: ClassRoom) -> bool:
            if not classroom.is_deleted:
                classroom.state_before_delete = classroom.state
            classroom.state = ContentState.DELETED
            return True

        return self._update(class_id, mutate)

    def restore(self, class_id: str) -> ClassRoom | None:
        def mutate(classroom: ClassRoom) -> bool:
            if not classroom.is_deleted:
                return False
            classroom.state = classroom.state_before_delete or ContentState.ACTIVE
            classroom.state_before_delete = None
            return True

        return self._update(class_id, mutate)

    def permanently_delete(self, class_id: str) -> None:
        self.save_all([c for c in self.load_all() if c.id != class_id])
        assignments = self._store.load(ASSIGNMENTS_KEY, Assignment.from_record)
        self._store.save(ASSIGNMENTS_KEY, [a for a in assignments if a.class_id != class_id])

        users = self._users.load_all()
        changed = False
        for user in users:
            if class_id in user.class_ids:
                user.class_ids.remove(class_id)
                changed = True
        if changed:
            self._users.save_all(users)
        logger.info("Permanently deleted class %s", class_id)

    def change_teacher(self, class_id: str, teacher_id: str) -> ClassRoom | None:
        teacher = self._users.get_by_id(teacher_id)
        if teacher is None or teacher.role is not UserRole.TEACHER:
            return None

        def mutate(classroom: ClassRoom) -> bool:
            if classroom.organization_id != teacher.organization_id:
                return False
            classroom.teacher_id = teacher_id
            return True

        return self._update(class_id, mutate)

    # --- Membership ---

    def join(self, code: str, student_id: str) -> JoinResult:
        student = self._users.get_by_id(student_id)
        if student is None or not student.organization_id:
            return JoinResult(None, "Your user profile could not be found.")

        classes = self.load_all()
        wanted = code.strip().upper()
        classroom = next((c for c in classes if c.code.upper() == wanted and c.is_active), None)
        if classroom is None:
            logger.warning("Student %s used unknown or archived class code %s", student_id, code)
            return JoinResult(None, "Invalid or archived class code.")
        if classroom.organization_id != student.organization_id:
            logger.warning("Student %s tried to join class %s of another organization", student_id, classroom.id)
            return JoinResult(None, "This class code belongs to a different organization.")

        if student_id not in classroom.student_ids:
            classroom.student_ids.append(student_id)
            self.save_all(classes)
            teacher = self._users.get_by_id(classroom.teacher_id)
            if teacher:
                self._notifications.create(
                    teacher.id,
                    "New Student Joined Class",
                    f'{student.full_name} has joined your class "{classroom.name}".',
                    "/teacher",
                )

        users = self._users.load_all()
        record = next((u for u in users if u.id == student_id), None)
        if record is not None and classroom.id not in record.class_ids:
            record.class_ids.append(classroom.id)
            self._users.save_all(users)
        return JoinResult(classroom)

    def add_student(self, class_id: str, student_id: str) -> bool:
        classes = self.load_all()
        users = self._users.load_all()
        classroom = next((c for c in classes if c.id == class_id), None)
        student = next((u for u in users if u.id == student_id), None)
        if classroom is None or student is None or student.role is not UserRole.STUDENT:
            return False
        if student_id in classroom.student_ids:
            return False

        classroom.student_ids.append(student_id)
        if class_id not in student.class_ids:
            student.class_ids.append(class_id)
        self.save_all(classes)
        self._users.save_all(users)
        return True

    def remove_student(self, class_id: str, student_id: str) -> bool:
        classes = self.load_all()
        users = self._users.load_all()
        classroom = next((c for c in classes if c.id == class_id), None)
        student = next((u for u in users if u.id == student_id), None)
        if classroom is None or student is None or student_id not in classroom.student_ids:
            return False

        classroom.student_ids.remove(student_id)
        if class_id in student.class_ids:
            student.class_ids.remove(class_id)
        self.save_all(classes)
        self._users.save_all(users)
        return True
