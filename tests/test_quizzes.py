from __future__ import annotations

from datetime import datetime, timezone

import pytest
from factories import dnd_question, make_org, mc_question
from pydantic import ValidationError

from classquiz.core.errors import TeacherContextError
from classquiz.core.models import ContentState, QuestionType

NOW = datetime(2024, 9, 1, 8, 0, tzinfo=timezone.utc)


def test_create_quiz_notifies_admin(repo):
    quiz = repo.create_quiz("teacher-1", "Arithmetic", [mc_question(), dnd_question()])

    assert quiz.organization_id == "org-1"
    assert [q.type for q in quiz.questions] == [QuestionType.MULTIPLE_CHOICE, QuestionType.DRAG_AND_DROP]
    assert quiz.questions[1].correct_mapping == {0: 1, 1: 2, 2: 0}
    assert repo.get_notifications_for_user("admin-1")[0].title == "New Quiz Created"


def test_create_quiz_requires_teacher_context(repo):
    with pytest.raises(TeacherContextError):
        repo.create_quiz("missing-teacher", "Nowhere", [mc_question()])


@pytest.mark.parametrize(
    "draft",
    [
        {"type": "multiple-choice", "question_text": "Pick", "options": ["only"], "correct_answer_index": 0},
        {"type": "multiple-choice", "question_text": "Pick", "options": ["a", "b"], "correct_answer_index": 5},
        {"type": "drag-and-drop", "question_text": "Match", "items": ["a"], "targets": []},
    ],
)
def test_invalid_question_drafts_are_rejected(repo, draft):
    with pytest.raises(ValidationError):
        repo.create_quiz("teacher-1", "Broken", [draft])


def test_true_false_gets_default_options(repo):
    quiz = repo.create_quiz(
        "teacher-1",
        "Facts",
        [{"type": "true-false", "question_text": "The sky is blue.", "correct_answer_index": 0}],
    )
    assert quiz.questions[0].options == ["True", "False"]


def test_update_keeps_question_ids_by_position(repo):
    quiz = repo.create_quiz("teacher-1", "Arithmetic", [mc_question("One"), mc_question("Two")])
    original_ids = [q.id for q in quiz.questions]

    updated = repo.update_quiz(
        quiz.id,
        "Arithmetic II",
        [mc_question("One, edited"), mc_question("Two"), mc_question("Three")],
    )

    assert updated.title == "Arithmetic II"
    assert [q.id for q in updated.questions[:2]] == original_ids
    assert updated.questions[2].id not in original_ids
    assert updated.questions[0].question_text == "One, edited"
    assert repo.update_quiz("missing", "x", [mc_question()]) is None


def test_duplicate_quiz(repo):
    repo.archive_quiz("quiz-1", True)
    copy = repo.duplicate_quiz("quiz-1")

    assert copy.id != "quiz-1"
    assert copy.title == "Copy of Basic Science Quiz"
    assert copy.state is ContentState.ACTIVE
    assert [q.id for q in copy.questions] == ["q1"]
    assert repo.duplicate_quiz("missing") is None


def test_soft_delete_and_restore(repo):
    repo.delete_quiz("quiz-1")
    assert "quiz-1" not in [q.id for q in repo.get_quizzes_by_teacher("teacher-1")]
    assert [q.id for q in repo.get_deleted_content("teacher-1").quizzes] == ["quiz-1"]
    assert repo.archive_quiz("quiz-1", True) is None

    restored = repo.restore_quiz("quiz-1")
    assert restored.state is ContentState.ACTIVE
    assert repo.restore_quiz("quiz-1") is None


def test_restore_keeps_archived_quiz_archived(repo):
    repo.archive_quiz("quiz-1", True)
    repo.delete_quiz("quiz-1")
    repo.delete_quiz("quiz-1")

    assert repo.restore_quiz("quiz-1").state is ContentState.ARCHIVED
    assert [item.quiz.id for item in repo.get_quizzes_for_student("student-1")] == ["quiz-dnd-1"]

    copy = repo.duplicate_quiz("quiz-1")
    assert copy.state is ContentState.ACTIVE
    assert copy.state_before_delete is None


def test_permanent_delete_cascades(repo):
    repo.save_quiz_attempt({"quiz_id": "quiz-1", "student_id": "student-1"})
    repo.toggle_archive_for_student("student-1", "quiz-1")

    repo.permanently_delete_quiz("quiz-1")

    assert repo.get_quiz_by_id("quiz-1") is None
    assert repo.get_assignments_by_quiz("quiz-1") == []
    assert repo.get_attempts_by_quiz("quiz-1") == []
    assert repo.get_student_archived_quiz_ids("student-1") == []
    assert [a.id for a in repo.get_assignments_by_class("class-1")] == ["assign-2"]


def test_student_archive_toggle(repo):
    assert repo.toggle_archive_for_student("student-1", "quiz-1") is True
    assert repo.get_student_archived_quiz_ids("student-1") == ["quiz-1"]
    assert repo.toggle_archive_for_student("student-1", "quiz-1") is False
    assert repo.get_student_archived_quiz_ids("student-1") == []


def test_quizzes_for_student_only_lists_active_quizzes(repo):
    offered = repo.get_quizzes_for_student("student-1")
    assert sorted(item.quiz.id for item in offered) == ["quiz-1", "quiz-dnd-1"]
    assert {item.assignment.class_id for item in offered} == {"class-1"}

    repo.archive_quiz("quiz-1", True)
    assert [item.quiz.id for item in repo.get_quizzes_for_student("student-1")] == ["quiz-dnd-1"]
    assert repo.get_quizzes_for_student("missing") == []


def test_assign_notifies_students_and_admin(repo):
    quiz = repo.create_quiz("teacher-1", "Arithmetic", [mc_question()])

    assignment = repo.assign_quiz_to_class(quiz.id, "class-1", NOW)

    assert assignment.available_from == NOW
    student_note = repo.get_notifications_for_user("student-1")[0]
    assert student_note.title == "New Quiz Assigned!"
    assert "Grade 5 Science" in student_note.message
    assert repo.get_notifications_for_user("admin-1")[0].title == "New Quiz Assigned"


def test_assign_rejects_duplicates_and_unknown_ids(repo):
    assert repo.assign_quiz_to_class("quiz-1", "class-1", NOW) is None
    assert repo.assign_quiz_to_class("missing", "class-1", NOW) is None
    assert repo.assign_quiz_to_class("quiz-1", "missing", NOW) is None
    assert len(repo.get_assignments_by_class("class-1")) == 2


def test_assign_rejects_other_organization(repo):
    _, _, other_teacher, _ = make_org(repo)
    foreign_quiz = repo.create_quiz(other_teacher, "Foreign", [mc_question()])
    before = len(repo.get_notifications_for_user("student-1"))

    assert repo.assign_quiz_to_class(foreign_quiz.id, "class-1", NOW) is None
    assert repo.get_assignments_by_quiz(foreign_quiz.id) == []
    assert len(repo.get_notifications_for_user("student-1")) == before


def test_teacher_listing_is_scoped_to_owner(repo):
    _, _, other_teacher, _ = make_org(repo)
    repo.create_quiz(other_teacher, "Foreign", [mc_question()])

    assert sorted(q.id for q in repo.get_quizzes_by_teacher("teacher-1")) == ["quiz-1", "quiz-dnd-1"]
    assert repo.get_quizzes_by_teacher("missing") == []


def test_assign_accepts_epoch_milliseconds_and_iso_strings(repo):
    first = repo.create_quiz("teacher-1", "Epoch", [mc_question()])
    second = repo.create_quiz("teacher-1", "Iso", [mc_question()])

    from_epoch = repo.assign_quiz_to_class(first.id, "class-1", int(NOW.timestamp() * 1000))
    from_text = repo.assign_quiz_to_class(second.id, "class-1", "2024-09-01T08:00:00+00:00")

    assert from_epoch.available_from == NOW
    assert from_text.available_from == NOW
    stored = {a.quiz_id: a for a in repo.get_assignments_by_class("class-1")}
    assert stored[first.id].available_from == NOW


def test_assign_rejects_unparseable_start_time(repo):
    quiz = repo.create_quiz("teacher-1", "Broken", [mc_question()])
    with pytest.raises(ValidationError):
        repo.assign_quiz_to_class(quiz.id, "class-1", "next tuesday")
    assert repo.get_assignments_by_quiz(quiz.id) == []
