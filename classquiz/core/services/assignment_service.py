"""Service linking quizzes to classes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging

from classquiz.constants.storage_constants import ASSIGNMENTS_KEY
from classquiz.core.identifiers import new_id
from classquiz.core.models import Assignment, Quiz
from classquiz.core.services.class_service import ClassService
from classquiz.core.services.notification_service import NotificationService
from classquiz.core.services.quiz_service import QuizService
from classquiz.core.services.user_service import UserService
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StudentQuiz:
    """A quiz offered to a student together with the assignment that offers it."""

    quiz: Quiz
    assignment: Assignment


class AssignmentService:
    def __init__(
        self,
        store: CollectionStore,
        users: UserService,
        classes: ClassService,
        quizzes: QuizService,
        notifications: NotificationService,
    ) -> None:
        self._store = store
        self._users = users
        self._classes = classes
        self._quizzes = quizzes
        self._notifications = notifications

    def load_all(self) -> list[Assignment]:
        return self._store.load(ASSIGNMENTS_KEY, Assignment.from_record)

    def get_by_class(self, class_id: str) -> list[Assignment]:
        return [a for a in self.load_all() if a.class_id == class_id]

    def get_by_quiz(self, quiz_id: str) -> list[Assignment]:
        return [a for a in self.load_all() if a.quiz_id == quiz_id]

    def assign(self, quiz_id: str, class_id: str, available_from: datetime) -> Assignment | None:
        """Assign a quiz to a class of the same organization, at most once per pair."""
        quiz = self._quizzes.get_by_id(quiz_id)
        classroom = self._classes.get_by_id(class_id)
        if quiz is None or classroom is None:
            logger.warning("Assignment rejected: quiz %s or class %s not found", quiz_id, class_id)
            return None
        if quiz.organization_id != classroom.organization_id:
            logger.warning("Assignment rejected: quiz %s and class %s are in different organizations", quiz_id, class_id)
            return None

        assignments = self.load_all()
        if any(a.quiz_id == quiz_id and a.class_id == class_id for a in assignments):
            return None

        assignment = Assignment(
            id=new_id("assign"),
            quiz_id=quiz_id,
            class_id=class_id,
            available_from=available_from,
        )
        assignments.append(assignment)
        self._store.save(ASSIGNMENTS_KEY, assignments)
        logger.info("Assigned quiz %s to class %s", quiz_id, class_id)

        for student_id in classroom.student_ids:
            self._notifications.create(
                student_id,
                "New Quiz Assigned!",
                f'A new quiz, "{quiz.title}", has been assigned to your class "{classroom.name}".',
                "/student",
            )

        admin = self._users.find_admin(quiz.organization_id)
        teacher = self._users.get_by_id(quiz.teacher_id)
        if admin and teacher:
            self._notifications.create(
                admin.id,
                "New Quiz Assigned",
                f'{teacher.full_name} assigned "{quiz.title}" to "{classroom.name}".',
                "/admin",
            )
        return assignment

    def get_quizzes_for_student(self, student_id: str) -> list[StudentQuiz]:
        student = self._users.get_by_id(student_id)
        if student is None or not student.organization_id or not student.class_ids:
            return []
        member_of = set(student.class_ids)
        quizzes = {
            q.id: q
            for q in self._quizzes.load_all()
            if q.is_active and q.organization_id == student.organization_id
        }
        return [
            StudentQuiz(quiz=quizzes[a.quiz_id], assignment=a)
            for a in self.load_all()
            if a.class_id in member_of and a.quiz_id in quizzes
        ]
