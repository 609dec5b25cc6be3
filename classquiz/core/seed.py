"""Initialization routine that fills an empty store with sample data."""

from __future__ import annotations

from datetime import timedelta
import logging

from classquiz.constants.storage_constants import (
    ALL_COLLECTION_KEYS,
    ASSIGNMENTS_KEY,
    CLASSES_KEY,
    ORGANIZATIONS_KEY,
    QUIZZES_KEY,
    USERS_KEY,
)
from classquiz.core.identifiers import utc_now
from classquiz.core.models import (
    Assignment,
    ClassRoom,
    Organization,
    OrganizationStatus,
    Question,
    QuestionType,
    Quiz,
    User,
    UserRole,
)
from classquiz.core.security import PasswordHasher
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)

SAMPLE_ORG_ID = "org-1"
SAMPLE_ADMIN_ID = "admin-1"
SAMPLE_TEACHER_ID = "teacher-1"
SAMPLE_STUDENT_ID = "student-1"
SAMPLE_CLASS_ID = "class-1"
SUPER_ADMIN_ID = "super-admin"
SAMPLE_PASSWORD = "password"


def initialize_store(store: CollectionStore, hasher: PasswordHasher | None = None) -> bool:
    """Seed ``store`` with a sample organization unless it already holds data.

    Returns True when sample data was written.
    """
    if store.has(ORGANIZATIONS_KEY):
        return False

    # Clear leftovers from an older layout
    for key in ALL_COLLECTION_KEYS:
        store.remove(key)

    hasher = hasher or PasswordHasher()
    password_hash = hasher.hash(SAMPLE_PASSWORD)
    now = utc_now()

    organizations = [
        Organization(
            id=SAMPLE_ORG_ID,
            name="Sample School",
            code="SAMPLE",
            status=OrganizationStatus.APPROVED,
            website="www.sampleschool.com",
            mobile="12345678",
            address="123 Sample St",
            country="Wonderland",
        )
    ]
    users = [
        User(
            id=SUPER_ADMIN_ID,
            email="superadmin@example.com",
            role=UserRole.SUPER_ADMIN,
            first_name="Super",
            last_name="Admin",
            password_hash=password_hash,
        ),
        User(
            id=SAMPLE_ADMIN_ID,
            email="admin@example.com",
            role=UserRole.ADMIN,
            first_name="School",
            last_name="Manager",
            organization_id=SAMPLE_ORG_ID,
            last_activity=now,
            password_hash=password_hash,
        ),
        User(
            id=SAMPLE_TEACHER_ID,
            email="teacher@example.com",
            role=UserRole.TEACHER,
            first_name="Ahmad",
            middle_name="Adel",
            last_name="Tubaishat",
            organization_id=SAMPLE_ORG_ID,
            last_activity=now,
            password_hash=password_hash,
        ),
        User(
            id=SAMPLE_STUDENT_ID,
            email="student@example.com",
            role=UserRole.STUDENT,
            first_name="John",
            middle_name="D",
            last_name="Smith",
            organization_id=SAMPLE_ORG_ID,
            class_ids=[SAMPLE_CLASS_ID],
            password_hash=password_hash,
        ),
    ]
    classes = [
        ClassRoom(
            id=SAMPLE_CLASS_ID,
            name="Grade 5 Science",
            teacher_id=SAMPLE_TEACHER_ID,
            organization_id=SAMPLE_ORG_ID,
            code="SCI5-2024",
            student_ids=[SAMPLE_STUDENT_ID],
        )
    ]
    quizzes = [
        Quiz(
            id="quiz-1",
            teacher_id=SAMPLE_TEACHER_ID,
            organization_id=SAMPLE_ORG_ID,
            title="Basic Science Quiz",
            questions=[
                Question(
                    id="q1",
                    type=QuestionType.MULTIPLE_CHOICE,
                    question_text="What is H2O?",
                    options=["Oxygen", "Water", "Carbon Dioxide", "Salt"],
                    correct_answer_index=1,
                )
            ],
        ),
        Quiz(
            id="quiz-dnd-1",
            teacher_id=SAMPLE_TEACHER_ID,
            organization_id=SAMPLE_ORG_ID,
            title="World Capitals (Drag & Drop)",
            questions=[
                Question(
                    id="q-dnd-1",
                    type=QuestionType.DRAG_AND_DROP,
                    question_text="Match the country to its capital city.",
                    items=["France", "Japan", "Germany"],
                    targets=["Berlin", "Paris", "Tokyo"],
                    correct_mapping={0: 1, 1: 2, 2: 0},
                )
            ],
        ),
    ]
    available_from = now - timedelta(minutes=2)
    assignments = [
        Assignment(id="assign-1", quiz_id="quiz-1", class_id=SAMPLE_CLASS_ID, available_from=available_from),
        Assignment(id="assign-2", quiz_id="quiz-dnd-1", class_id=SAMPLE_CLASS_ID, available_from=available_from),
    ]

    store.save(ORGANIZATIONS_KEY, organizations)
    store.save(USERS_KEY, users)
    store.save(CLASSES_KEY, classes)
    store.save(QUIZZES_KEY, quizzes)
    store.save(ASSIGNMENTS_KEY, assignments)
    for key in ALL_COLLECTION_KEYS:
        if not store.has(key):
            store.set(key, [])
    logger.info("Seeded store with sample organization %s", SAMPLE_ORG_ID)
    return True
