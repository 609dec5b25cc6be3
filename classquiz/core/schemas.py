"""Input payloads accepted by the repository.

Each model validates user-supplied data before it becomes a stored record.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from classquiz.core.models import QuestionType, UserRole

TRUE_FALSE_OPTIONS = ["True", "False"]


class OrganizationRegistration(BaseModel):
    name: str = Field(..., min_length=1, description="Organization display name")
    website: str = Field("", description="Public website")
    mobile: str = Field("", description="Contact phone number")
    address: str = Field("", description="Postal address")
    country: str = Field("", description="Country")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Organization name must not be empty.")
        return cleaned


class NewUser(BaseModel):
    email: str = Field(..., min_length=3, description="Login email, unique")
    role: UserRole = Field(..., description="super-admin, admin, teacher or student")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    middle_name: str = Field("", description="Optional middle name")
    organization_id: Optional[str] = Field(None, description="Owning organization, absent for super-admin")
    class_ids: list[str] = Field(default_factory=list, description="Classes a student belongs to")
    points: int = Field(0, ge=0, description="Cumulative student score")

    @field_validator("email")
    @classmethod
    def _strip_email(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def _check_organization(self) -> NewUser:
        if self.role is not UserRole.SUPER_ADMIN and not self.organization_id:
            raise ValueError("Every non super-admin user must belong to an organization.")
        return self


class QuestionDraft(BaseModel):
    """A question as authored, before the store assigns its id."""

    type: QuestionType = Field(..., description="Question variant")
    question_text: str = Field(..., min_length=1, description="Prompt shown to students")
    options: list[str] = Field(default_factory=list, description="Choices for multiple-choice questions")
    correct_answer_index: Optional[int] = Field(None, ge=0, description="Index of the correct option")
    items: list[str] = Field(default_factory=list, description="Draggable items")
    targets: list[str] = Field(default_factory=list, description="Drop targets")
    correct_mapping: Optional[dict[int, int]] = Field(None, description="Item index to target index")

    @model_validator(mode="after")
    def _check_variant(self) -> QuestionDraft:
        if self.type is QuestionType.TRUE_FALSE and not self.options:
            self.options = list(TRUE_FALSE_OPTIONS)
        if self.type in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE):
            if len(self.options) < 2:
                raise ValueError("Choice questions need at least two options.")
            if self.correct_answer_index is None or self.correct_answer_index >= len(self.options):
                raise ValueError("Correct answer index must point at one of the options.")
        else:
            if not self.items or not self.targets:
                raise ValueError("Drag-and-drop questions need items and targets.")
            mapping = self.correct_mapping or {}
            for item_index, target_index in mapping.items():
                if not 0 <= item_index < len(self.items):
                    raise ValueError(f"Mapping refers to unknown item {item_index}.")
                if not 0 <= target_index < len(self.targets):
                    raise ValueError(f"Mapping refers to unknown target {target_index}.")
        return self


class AnswerSubmission(BaseModel):
    question_id: str = Field(..., description="Question being answered")
    is_correct: bool = Field(False, description="Client-side verdict for choice questions")
    selected_option_index: Optional[int] = Field(None, ge=0, description="Chosen option")
    mapping: Optional[dict[int, int]] = Field(None, description="Submitted item to target mapping")


class AttemptSubmission(BaseModel):
    quiz_id: str = Field(..., description="Quiz taken")
    student_id: str = Field(..., description="Submitting student")
    answers: list[AnswerSubmission] = Field(default_factory=list)
    completed_at: Optional[datetime] = Field(None, description="Submission time, defaults to now")


class CsvStudentRow(BaseModel):
    """One roster row; blank required fields are reported by the import, not here."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    middle_name: str = ""

    @field_validator("first_name", "last_name", "email", "middle_name", mode="before")
    @classmethod
    def _strip(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip()
