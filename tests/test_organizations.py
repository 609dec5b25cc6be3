from __future__ import annotations

import re
from datetime import datetime, timezone

from factories import dnd_question, make_org, mc_question

from classquiz.core.models import OrganizationStatus


def test_registration_starts_pending_and_notifies_super_admin(repo):
    org = repo.create_organization(
        {"name": "Riverside High", "website": "riverside.test", "country": "Narnia"}
    )

    assert org.status is OrganizationStatus.PENDING
    assert re.fullmatch(r"RIVE[A-Z0-9]{4}", org.code)
    assert [o.id for o in repo.get_pending_organizations()] == [org.id]

    notifications = repo.get_notifications_for_user("super-admin")
    assert notifications[0].title == "New Organization Pending"
    assert "Riverside High" in notifications[0].message


def test_lookup_by_code_is_case_insensitive_and_approved_only(repo):
    org = repo.create_organization({"name": "Hilltop"})
    assert repo.get_organization_by_code(org.code.lower()) is None

    repo.approve_organization(org.id)
    found = repo.get_organization_by_code(org.code.lower())
    assert found is not None and found.id == org.id
    assert repo.get_organization_by_code("sample").id == "org-1"


def test_approve_notifies_the_organization_admin(repo):
    org_id, admin_id, _, _ = make_org(repo)

    assert repo.get_organization_by_id(org_id).status is OrganizationStatus.APPROVED
    titles = [n.title for n in repo.get_notifications_for_user(admin_id)]
    assert titles == ["Organization Approved!"]


def test_reject_flips_status(repo):
    org = repo.create_organization({"name": "Shady Institute"})
    repo.reject_organization(org.id)
    assert repo.get_organization_by_id(org.id).status is OrganizationStatus.REJECTED
    assert repo.get_pending_organizations() == []


def test_unknown_organization_status_change_is_a_no_op(repo):
    assert repo.approve_organization("missing") is None
    assert repo.reject_organization("missing") is None


def _snapshot(repo, org_id):
    return {
        "users": sorted(u.id for u in repo.get_all_users(org_id)),
        "classes": sorted(c.id for c in repo.get_all_classes(org_id)),
        "quizzes": sorted(q.id for q in repo.get_all_quizzes(org_id)),
        "attempts": sorted(a.id for a in repo.get_all_attempts(org_id)),
        "assignments": sorted(a.id for a in repo.get_assignments_by_class("class-1")),
        "teacher_notifications": [n.id for n in repo.get_notifications_for_user("teacher-1")],
        "super_admin_notifications": [n.id for n in repo.get_notifications_for_user("super-admin")],
    }


def test_delete_organization_cascades_and_touches_nothing_else(repo):
    org_id, admin_id, teacher_id, student_id = make_org(repo)
    classroom = repo.create_class("Algebra", teacher_id)
    quiz = repo.create_quiz(teacher_id, "Fractions", [mc_question(), dnd_question()])
    repo.join_class(classroom.code, student_id)
    repo.assign_quiz_to_class(quiz.id, classroom.id, datetime.now(timezone.utc))
    repo.save_quiz_attempt({"quiz_id": quiz.id, "student_id": student_id, "answers": []})
    repo.toggle_archive_for_student(student_id, quiz.id)

    # Activity in the sample organization that must survive
    repo.save_quiz_attempt({"quiz_id": "quiz-1", "student_id": "student-1", "answers": []})
    before = _snapshot(repo, "org-1")

    repo.delete_organization(org_id)

    assert repo.get_organization_by_id(org_id) is None
    assert repo.get_all_users(org_id) == []
    assert repo.get_all_classes(org_id) == []
    assert repo.get_all_quizzes(org_id) == []
    assert repo.get_all_attempts(org_id) == []
    assert repo.get_assignments_by_class(classroom.id) == []
    assert repo.get_assignments_by_quiz(quiz.id) == []
    assert repo.get_student_archived_quiz_ids(student_id) == []
    for user_id in (admin_id, teacher_id, student_id):
        assert repo.get_notifications_for_user(user_id) == []

    assert _snapshot(repo, "org-1") == before
    assert repo.get_organization_by_id("org-1") is not None
