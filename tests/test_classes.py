from __future__ import annotations

import re

import pytest
from factories import make_org

from classquiz.core.errors import TeacherContextError
from classquiz.core.models import ContentState


def _new_student(repo, email: str = "kid@example.com", organization_id: str = "org-1"):
    return repo.create_user(
        {
            "email": email,
            "role": "student",
            "first_name": "Kid",
            "last_name": "Learner",
            "organization_id": organization_id,
        },
        "pw",
    )


def test_create_class_generates_code_and_notifies_admin(repo):
    classroom = repo.create_class("Algebra I", "teacher-1")

    assert re.fullmatch(r"ALGE-\d{4}", classroom.code)
    assert classroom.organization_id == "org-1"
    assert classroom.state is ContentState.ACTIVE
    notification = repo.get_notifications_for_user("admin-1")[0]
    assert notification.title == "New Class Created"
    assert "Ahmad Tubaishat" in notification.message


def test_create_class_requires_teacher_context(repo):
    with pytest.raises(TeacherContextError):
        repo.create_class("Ghost Class", "missing-teacher")
    with pytest.raises(TeacherContextError):
        repo.create_class("Root Class", "super-admin")


def test_join_class_is_idempotent(repo):
    classroom = repo.create_class("Biology", "teacher-1")
    student = _new_student(repo)

    first = repo.join_class(classroom.code.lower(), student.id)
    second = repo.join_class(classroom.code, student.id)

    assert first.error is None and second.error is None
    stored_class = repo.get_class_by_id(classroom.id)
    assert stored_class.student_ids.count(student.id) == 1
    assert repo.get_user_by_id(student.id).class_ids.count(classroom.id) == 1
    joined = [n for n in repo.get_notifications_for_user("teacher-1") if n.title == "New Student Joined Class"]
    assert len(joined) == 1


def test_join_rejects_archived_deleted_and_unknown_codes(repo):
    classroom = repo.create_class("Chemistry", "teacher-1")
    student = _new_student(repo)

    repo.archive_class(classroom.id, True)
    assert repo.join_class(classroom.code, student.id).error == "Invalid or archived class code."
    repo.archive_class(classroom.id, False)
    repo.delete_class(classroom.id)
    assert repo.join_class(classroom.code, student.id).classroom is None
    assert repo.join_class("NOPE-0000", student.id).classroom is None
    assert repo.join_class(classroom.code, "missing").error == "Your user profile could not be found."


def test_join_rejects_other_organization(repo):
    _, _, _, other_student = make_org(repo)
    result = repo.join_class("SCI5-2024", other_student)

    assert result.classroom is None
    assert result.error == "This class code belongs to a different organization."
    assert other_student not in repo.get_class_by_id("class-1").student_ids


def test_soft_delete_hides_class_until_restored(repo):
    classroom = repo.create_class("History", "teacher-1")

    repo.delete_class(classroom.id)
    assert classroom.id not in [c.id for c in repo.get_classes_by_teacher("teacher-1")]
    assert [c.id for c in repo.get_deleted_content("teacher-1").classes] == [classroom.id]

    repo.restore_class(classroom.id)
    assert classroom.id in [c.id for c in repo.get_classes_by_teacher("teacher-1")]


def test_archived_class_stays_visible_to_owner(repo):
    classroom = repo.create_class("Music", "teacher-1")
    repo.archive_class(classroom.id, True)

    listed = {c.id: c for c in repo.get_classes_by_teacher("teacher-1")}
    assert listed[classroom.id].state is ContentState.ARCHIVED


def test_archive_ignores_deleted_class(repo):
    classroom = repo.create_class("Art", "teacher-1")
    repo.delete_class(classroom.id)

    assert repo.archive_class(classroom.id, True) is None
    assert repo.get_class_by_id(classroom.id).state is ContentState.DELETED


def test_update_missing_class_returns_none(repo):
    assert repo.update_class("missing", "Renamed") is None
    assert repo.update_class("class-1", "Grade 5 Physics").name == "Grade 5 Physics"


def test_permanent_delete_removes_assignments_and_memberships(repo):
    repo.permanently_delete_class("class-1")

    assert repo.get_class_by_id("class-1") is None
    assert repo.get_assignments_by_class("class-1") == []
    assert repo.get_user_by_id("student-1").class_ids == []
    assert repo.get_quiz_by_id("quiz-1") is not None


def test_add_and_remove_student(repo):
    classroom = repo.create_class("Geography", "teacher-1")
    student = _new_student(repo)

    assert repo.add_student_to_class(classroom.id, student.id) is True
    assert repo.add_student_to_class(classroom.id, student.id) is False
    assert repo.add_student_to_class(classroom.id, "teacher-1") is False
    assert [u.id for u in repo.get_students_by_class_id(classroom.id)] == [student.id]

    assert repo.remove_student_from_class(classroom.id, student.id) is True
    assert repo.remove_student_from_class(classroom.id, student.id) is False
    assert classroom.id not in repo.get_user_by_id(student.id).class_ids


def test_update_class_teacher_stays_in_organization(repo):
    _, _, other_teacher, _ = make_org(repo)
    substitute = repo.create_user(
        {
            "email": "sub@example.com",
            "role": "teacher",
            "first_name": "Sub",
            "last_name": "Teacher",
            "organization_id": "org-1",
        },
        "pw",
    )

    assert repo.update_class_teacher("class-1", other_teacher) is None
    assert repo.update_class_teacher("class-1", "student-1") is None
    assert repo.update_class_teacher("class-1", substitute.id).teacher_id == substitute.id


def test_classes_by_ids(repo):
    classroom = repo.create_class("Drama", "teacher-1")
    found = repo.get_classes_by_ids([classroom.id, "class-1", "missing"])
    assert sorted(c.id for c in found) == sorted([classroom.id, "class-1"])


def test_restore_keeps_archived_class_archived(repo):
    student = _new_student(repo)
    repo.archive_class("class-1", True)
    repo.delete_class("class-1")

    restored = repo.restore_class("class-1")

    assert restored.state is ContentState.ARCHIVED
    assert repo.get_class_by_id("class-1").state is ContentState.ARCHIVED
    assert repo.join_class("SCI5-2024", student.id).error == "Invalid or archived class code."


def test_restored_archived_content_does_not_block_teacher_removal(repo):
    repo.archive_class("class-1", True)
    repo.delete_class("class-1")
    repo.restore_class("class-1")
    repo.archive_quiz("quiz-1", True)
    repo.archive_quiz("quiz-dnd-1", True)

    assert repo.delete_user("teacher-1", "admin-1").success is True


def test_class_code_prefix_skips_spaces_and_punctuation(repo):
    classroom = repo.create_class("A.I. Club", "teacher-1")
    assert re.fullmatch(r"AICL-\d{4}", classroom.code)
