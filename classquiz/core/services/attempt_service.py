"""Service for scoring and storing quiz attempts."""

from __future__ import annotations

import logging

from classquiz.constants.storage_constants import ATTEMPTS_KEY
from classquiz.core.errors import QuizNotFoundError, StudentNotFoundError
from classquiz.core.identifiers import new_id, utc_now
from classquiz.core.models import AnswerRecord, QuestionType, Quiz, QuizAttempt
from classquiz.core.schemas import AttemptSubmission
from classquiz.core.services.notification_service import NotificationService
from classquiz.core.services.quiz_service import QuizService
from classquiz.core.services.user_service import UserService
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)


def score_answers(quiz: Quiz, answers: list[AnswerRecord]) -> tuple[int, int]:
    """Return ``(score, max_score)`` of ``answers`` against the quiz's current questions.

    Choice questions are worth one point when the matching answer is marked
    correct. Drag-and-drop questions are worth one point per item, earned when
    the submitted target for that item equals the correct one.
    """
    by_question = {answer.question_id: answer for answer in answers}
    score = 0
    max_score = 0
    for question in quiz.questions:
        answer = by_question.get(question.id)
        if question.type in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE):
            max_score += 1
            if answer is not None and answer.is_correct:
                score += 1
        elif question.type is QuestionType.DRAG_AND_DROP:
            max_score += len(question.items)
            if answer is not None and answer.mapping and question.correct_mapping:
                score += sum(
                    1
                    for item_index, target_index in question.correct_mapping.items()
                    if answer.mapping.get(item_index) == target_index
                )
    return score, max_score


class AttemptService:
    def __init__(
        self,
        store: CollectionStore,
        users: UserService,
        quizzes: QuizService,
        notifications: NotificationService,
    ) -> None:
        self._store = store
        self._users = users
        self._quizzes = quizzes
        self._notifications = notifications

    def load_all(self) -> list[QuizAttempt]:
        return self._store.load(ATTEMPTS_KEY, QuizAttempt.from_record)

    def save(self, submission: AttemptSubmission) -> QuizAttempt:
        student = self._users.get_by_id(submission.student_id)
        if student is None or not student.organization_id:
            raise StudentNotFoundError(f"Student {submission.student_id} not found for saving attempt")
        quiz = self._quizzes.get_by_id(submission.quiz_id)
        if quiz is None:
            raise QuizNotFoundError(f"Quiz {submission.quiz_id} not found")

        answers = [
            AnswerRecord(
                question_id=answer.question_id,
                is_correct=answer.is_correct,
                selected_option_index=answer.selected_option_index,
                mapping=dict(answer.mapping) if answer.mapping is not None else None,
            )
            for answer in submission.answers
        ]
        score, max_score = score_answers(quiz, answers)

        attempts = self.load_all()
        attempt = QuizAttempt(
            id=new_id("attempt"),
            quiz_id=quiz.id,
            student_id=student.id,
            organization_id=student.organization_id,
            answers=answers,
            score=score,
            max_score=max_score,
            completed_at=submission.completed_at or utc_now(),
        )
        attempts.append(attempt)
        self._store.save(ATTEMPTS_KEY, attempts)

        users = self._users.load_all()
        record = next((u for u in users if u.id == student.id), None)
        if record is not None:
            record.points += score
            self._users.save_all(users)
        logger.info("Student %s scored %d/%d on quiz %s", student.id, score, max_score, quiz.id)

        self._notifications.create(
            quiz.teacher_id,
            "Quiz Submitted",
            f'{student.full_name} has completed the quiz "{quiz.title}".',
            "/teacher",
        )
        return attempt

    def get_by_student(self, student_id: str) -> list[QuizAttempt]:
        return [a for a in self.load_all() if a.student_id == student_id]

    def get_by_quiz(self, quiz_id: str) -> list[QuizAttempt]:
        return [a for a in self.load_all() if a.quiz_id == quiz_id]

    def get_by_id(self, attempt_id: str) -> QuizAttempt | None:
        return next((a for a in self.load_all() if a.id == attempt_id), None)

    def get_by_organization(self, organization_id: str) -> list[QuizAttempt]:
        return [a for a in self.load_all() if a.organization_id == organization_id]
