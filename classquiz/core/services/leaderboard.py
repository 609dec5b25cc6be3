"""Service ranking an organization's students by accumulated points."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from classquiz.core.models import UserRole
from classquiz.core.services.attempt_service import AttemptService
from classquiz.core.services.user_service import UserService


@dataclass(slots=True)
class LeaderboardRow:
    """One ranked student."""

    student_id: str
    display_name: str
    points: int
    attempt_count: int


class Leaderboard:
    """Builds leaderboards from stored student points."""

    def __init__(self, users: UserService, attempts: AttemptService) -> None:
        self._users = users
        self._attempts = attempts

    def get_top_students(self, organization_id: str, limit: int = 10) -> list[LeaderboardRow]:
        """Return the top N students sorted by points, then name."""
        students = [
            u for u in self._users.get_by_organization(organization_id) if u.role is UserRole.STUDENT
        ]
        attempt_counts = Counter(a.student_id for a in self._attempts.get_by_organization(organization_id))
        ranked = sorted(students, key=lambda s: (-s.points, s.full_name.lower()))
        return [
            LeaderboardRow(
                student_id=student.id,
                display_name=student.full_name,
                points=student.points,
                attempt_count=attempt_counts.get(student.id, 0),
            )
            for student in ranked[:limit]
        ]
