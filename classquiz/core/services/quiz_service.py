"""Service for quiz authoring and the quiz lifecycle."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Callable

from classquiz.constants.storage_constants import (
    ASSIGNMENTS_KEY,
    ATTEMPTS_KEY,
    QUIZZES_KEY,
    STUDENT_ARCHIVES_KEY,
)
from classquiz.core.errors import TeacherContextError
from classquiz.core.identifiers import new_id
from classquiz.core.models import (
    Assignment,
    ContentState,
    Question,
    Quiz,
    QuizAttempt,
    StudentArchive,
)
from classquiz.core.schemas import QuestionDraft
from classquiz.core.services.notification_service import NotificationService
from classquiz.core.services.user_service import UserService
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)


def build_questions(drafts: list[QuestionDraft], existing: list[Question] | None = None) -> list[Question]:
    """Turn drafts into stored questions.

    A draft at an index that already held a question keeps that question's id;
    drafts at new indexes get fresh ids.
    """
    existing = existing or []
    questions: list[Question] = []
    for index, draft in enumerate(drafts):
        question_id = existing[index].id if index < len(existing) else new_id("q")
        questions.append(
            Question(
                id=question_id,
                type=draft.type,
                question_text=draft.question_text.strip(),
                options=[option.strip() for option in draft.options],
                correct_answer_index=draft.correct_answer_index,
                items=list(draft.items),
                targets=list(draft.targets),
                correct_mapping=dict(draft.correct_mapping) if draft.correct_mapping is not None else None,
            )
        )
    return questions


class QuizService:
    """Manages quizzes, their questions and the per-student archive toggle."""

    def __init__(
        self,
        store: CollectionStore,
        users: UserService,
        notifications: NotificationService,
    ) -> None:
        self._store = store
        self._users = users
        self._notifications = notifications

    def load_all(self) -> list[Quiz]:
        return self._store.load(QUIZZES_KEY, Quiz.from_record)

    def save_all(self, quizzes: list[Quiz]) -> None:
        self._store.save(QUIZZES_KEY, quizzes)

    def _update(self, quiz_id: str, mutate: Callable[[Quiz], bool]) -> Quiz | None:
        quizzes = self.load_all()
        quiz = next((q for q in quizzes if q.id == quiz_id), None)
        if quiz is None or not mutate(quiz):
            return None
        self.save_all(quizzes)
        return quiz

    # --- Reads ---

    def get_by_id(self, quiz_id: str) -> Quiz | None:
        return next((q for q in self.load_all() if q.id == quiz_id), None)

    def get_by_organization(self, organization_id: str) -> list[Quiz]:
        return [q for q in self.load_all() if q.organization_id == organization_id]

    def _teacher_quizzes(self, teacher_id: str) -> list[Quiz]:
        teacher = self._users.get_by_id(teacher_id)
        if teacher is None or not teacher.organization_id:
            return []
        return [
            q
            for q in self.load_all()
            if q.teacher_id == teacher_id and q.organization_id == teacher.organization_id
        ]

    def get_by_teacher(self, teacher_id: str) -> list[Quiz]:
        return [q for q in self._teacher_quizzes(teacher_id) if not q.is_deleted]

    def get_deleted_by_teacher(self, teacher_id: str) -> list[Quiz]:
        return [q for q in self._teacher_quizzes(teacher_id) if q.is_deleted]

    def get_deleted_by_organization(self, organization_id: str) -> list[Quiz]:
        return [q for q in self.load_all() if q.organization_id == organization_id and q.is_deleted]

    def has_active_content(self, teacher_id: str) -> bool:
        return any(q.teacher_id == teacher_id and q.is_active for q in self.load_all())

    # --- Authoring ---

    def create(self, teacher_id: str, title: str, drafts: list[QuestionDraft]) -> Quiz:
        teacher = self._users.get_by_id(teacher_id)
        if teacher is None or not teacher.organization_id:
            raise TeacherContextError("Cannot create quiz: Teacher not found or not in an organization.")

        quizzes = self.load_all()
        quiz = Quiz(
            id=new_id("quiz"),
            teacher_id=teacher_id,
            organization_id=teacher.organization_id,
            title=title.strip(),
            questions=build_questions(drafts),
        )
        quizzes.append(quiz)
        self.save_all(quizzes)
        self._users.touch_activity(teacher_id)
        logger.info("Teacher %s created quiz %s with %d questions", teacher_id, quiz.id, len(quiz.questions))

        admin = self._users.find_admin(teacher.organization_id)
        if admin:
            self._notifications.create(
                admin.id,
                "New Quiz Created",
                f'{teacher.full_name} created a new quiz: "{quiz.title}".',
                "/admin",
            )
        return quiz

    def update(self, quiz_id: str, title: str, drafts: list[QuestionDraft]) -> Quiz | None:
        def mutate(quiz: Quiz) -> bool:
            quiz.title = title.strip()
            quiz.questions = build_questions(drafts, quiz.questions)
            return True

        quiz = self._update(quiz_id, mutate)
        if quiz:
            self._users.touch_activity(quiz.teacher_id)
        return quiz

    def duplicate(self, quiz_id: str) -> Quiz | None:
        quizzes = self.load_all()
        original = next((q for q in quizzes if q.id == quiz_id), None)
        if original is None:
            return None
        copy = replace(
            original,
            id=new_id("quiz"),
            title=f"Copy of {original.title}",
            questions=[replace(question) for question in original.questions],
            state=ContentState.ACTIVE,
            state_before_delete=None,
        )
        quizzes.append(copy)
        self.save_all(quizzes)
        self._users.touch_activity(copy.teacher_id)
        return copy

    def archive(self, quiz_id: str, archive: bool) -> Quiz | None:
        def mutate(quiz: Quiz) -> bool:
            if quiz.is_deleted:
                return False
            quiz.state = ContentState.ARCHIVED if archive else ContentState.ACTIVE
            return True

        return self._update(quiz_id, mutate)

    def soft_delete(self, quiz_id: str) -> Quiz | None:
        def mutate(quiz: Quiz) -> bool:
            if not quiz.is_deleted:
                quiz.state_before_delete = quiz.state
            quiz.state = ContentState.DELETED
            return True

        return self._update(quiz_id, mutate)

    def restore(self, quiz_id: str) -> Quiz | None:
        def mutate(quiz: Quiz) -> bool:
            if not quiz.is_deleted:
                return False
            quiz.state = quiz.state_before_delete or ContentState.ACTIVE
            quiz.state_before_delete = None
            return True

        return self._update(quiz_id, mutate)

    def permanently_delete(self, quiz_id: str) -> None:
        self.save_all([q for q in self.load_all() if q.id != quiz_id])
        assignments = self._store.load(ASSIGNMENTS_KEY, Assignment.from_record)
        self._store.save(ASSIGNMENTS_KEY, [a for a in assignments if a.quiz_id != quiz_id])
        attempts = self._store.load(ATTEMPTS_KEY, QuizAttempt.from_record)
        self._store.save(ATTEMPTS_KEY, [a for a in attempts if a.quiz_id != quiz_id])
        archives = self._store.load(STUDENT_ARCHIVES_KEY, StudentArchive.from_record)
        self._store.save(STUDENT_ARCHIVES_KEY, [a for a in archives if a.quiz_id != quiz_id])
        logger.info("Permanently deleted quiz %s", quiz_id)

    # --- Student archive toggle ---

    def toggle_student_archive(self, student_id: str, quiz_id: str) -> bool:
        """Hide or unhide a quiz for one student. Returns True when it is now hidden."""
        archives = self._store.load(STUDENT_ARCHIVES_KEY, StudentArchive.from_record)
        existing = next((a for a in archives if a.student_id == student_id and a.quiz_id == quiz_id), None)
        if existing is not None:
            archives.remove(existing)
        else:
            archives.append(StudentArchive(student_id=student_id, quiz_id=quiz_id))
        self._store.save(STUDENT_ARCHIVES_KEY, archives)
        return existing is None

    def get_student_archived_quiz_ids(self, student_id: str) -> list[str]:
        return [
            a.quiz_id
            for a in self._store.load(STUDENT_ARCHIVES_KEY, StudentArchive.from_record)
            if a.student_id == student_id
        ]
