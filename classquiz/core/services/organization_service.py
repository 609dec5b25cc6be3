"""Service for the organization (tenant) lifecycle."""

from __future__ import annotations

import logging

from classquiz.constants.storage_constants import (
    ASSIGNMENTS_KEY,
    ATTEMPTS_KEY,
    CLASSES_KEY,
    NOTIFICATIONS_KEY,
    ORGANIZATIONS_KEY,
    QUIZZES_KEY,
    STUDENT_ARCHIVES_KEY,
)
from classquiz.core.identifiers import new_id, organization_code
from classquiz.core.models import (
    Assignment,
    ClassRoom,
    Notification,
    Organization,
    OrganizationStatus,
    Quiz,
    QuizAttempt,
    StudentArchive,
)
from classquiz.core.schemas import OrganizationRegistration
from classquiz.core.services.notification_service import NotificationService
from classquiz.core.services.user_service import UserService
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)


class OrganizationService:
    """Registration, approval and cascading deletion of organizations."""

    def __init__(
        self,
        store: CollectionStore,
        users: UserService,
        notifications: NotificationService,
    ) -> None:
        self._store = store
        self._users = users
        self._notifications = notifications

    def _load(self) -> list[Organization]:
        return self._store.load(ORGANIZATIONS_KEY, Organization.from_record)

    def get_all(self) -> list[Organization]:
        return self._load()

    def get_pending(self) -> list[Organization]:
        return [o for o in self._load() if o.status is OrganizationStatus.PENDING]

    def get_by_id(self, organization_id: str) -> Organization | None:
        return next((o for o in self._load() if o.id == organization_id), None)

    def get_by_code(self, code: str) -> Organization | None:
        wanted = code.strip().upper()
        return next(
            (
                o
                for o in self._load()
                if o.code.upper() == wanted and o.status is OrganizationStatus.APPROVED
            ),
            None,
        )

    def create(self, data: OrganizationRegistration) -> Organization:
        organizations = self._load()
        organization = Organization(
            id=new_id("org"),
            name=data.name,
            code=organization_code(data.name, {o.code.upper() for o in organizations}),
            status=OrganizationStatus.PENDING,
            website=data.website,
            mobile=data.mobile,
            address=data.address,
            country=data.country,
        )
        organizations.append(organization)
        self._store.save(ORGANIZATIONS_KEY, organizations)
        logger.info("Registered organization %s (%s), pending approval", organization.id, organization.code)

        super_admin = self._users.find_super_admin()
        if super_admin:
            self._notifications.create(
                super_admin.id,
                "New Organization Pending",
                f'"{organization.name}" has registered and is awaiting your approval.',
                "/superadmin",
            )
        return organization

    def _set_status(self, organization_id: str, status: OrganizationStatus) -> Organization | None:
        organizations = self._load()
        organization = next((o for o in organizations if o.id == organization_id), None)
        if organization is None:
            return None
        organization.status = status
        self._store.save(ORGANIZATIONS_KEY, organizations)
        logger.info("Organization %s is now %s", organization_id, status.value)
        return organization

    def approve(self, organization_id: str) -> Organization | None:
        organization = self._set_status(organization_id, OrganizationStatus.APPROVED)
        if organization is None:
            return None
        admin = self._users.find_admin(organization_id)
        if admin:
            self._notifications.create(
                admin.id,
                "Organization Approved!",
                f'Your organization "{organization.name}" has been approved. '
                "You can now access your dashboard.",
                "/admin",
            )
        return organization

    def reject(self, organization_id: str) -> Organization | None:
        return self._set_status(organization_id, OrganizationStatus.REJECTED)

    def delete(self, organization_id: str) -> None:
        """Remove the organization and every row that belongs to or references it."""
        users = self._users.load_all()
        classes = self._store.load(CLASSES_KEY, ClassRoom.from_record)
        quizzes = self._store.load(QUIZZES_KEY, Quiz.from_record)

        user_ids = {u.id for u in users if u.organization_id == organization_id}
        class_ids = {c.id for c in classes if c.organization_id == organization_id}
        quiz_ids = {q.id for q in quizzes if q.organization_id == organization_id}

        organizations = [o for o in self._load() if o.id != organization_id]
        attempts = [
            a
            for a in self._store.load(ATTEMPTS_KEY, QuizAttempt.from_record)
            if a.organization_id != organization_id
        ]
        assignments = [
            a
            for a in self._store.load(ASSIGNMENTS_KEY, Assignment.from_record)
            if a.class_id not in class_ids and a.quiz_id not in quiz_ids
        ]
        archives = [
            a
            for a in self._store.load(STUDENT_ARCHIVES_KEY, StudentArchive.from_record)
            if a.student_id not in user_ids
        ]
        notifications = [
            n
            for n in self._store.load(NOTIFICATIONS_KEY, Notification.from_record)
            if n.user_id not in user_ids
        ]

        self._store.save(ORGANIZATIONS_KEY, organizations)
        self._users.save_all([u for u in users if u.organization_id != organization_id])
        self._store.save(CLASSES_KEY, [c for c in classes if c.organization_id != organization_id])
        self._store.save(QUIZZES_KEY, [q for q in quizzes if q.organization_id != organization_id])
        self._store.save(ATTEMPTS_KEY, attempts)
        self._store.save(ASSIGNMENTS_KEY, assignments)
        self._store.save(STUDENT_ARCHIVES_KEY, archives)
        self._store.save(NOTIFICATIONS_KEY, notifications)
        logger.info(
            "Deleted organization %s with %d users, %d classes and %d quizzes",
            organization_id,
            len(user_ids),
            len(class_ids),
            len(quiz_ids),
        )
