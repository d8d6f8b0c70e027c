from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


def round_half_up(value: float, places: int = 0) -> float:
    """Round with ties going away from zero (2.5 -> 3, 3.25 -> 3.3)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        raise ValueError("expected text, got a boolean")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    if isinstance(value, list):
        return ", ".join(_as_text(v) for v in value if v is not None)
    raise ValueError(f"expected text, got {type(value).__name__}")


def _as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if not isinstance(value, list):
        raise ValueError(f"expected a list, got {type(value).__name__}")

    items: List[str] = []
    for item in value:
        if isinstance(item, dict):
            # e.g. {"name": "AWS Solutions Architect", "issuer": "Amazon"}
            item = item.get("name") or item.get("title")
        text = _as_text(item)
        if text:
            items.append(text)
    return items


def _as_record_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if not isinstance(value, list):
        raise ValueError(f"expected a list of objects, got {type(value).__name__}")
    return value


# ---------- job requirements ----------


class ExperienceRequirement(BaseModel):
    minimum: float = Field(0, ge=0)
    maximum: float = Field(0, ge=0)
    preferred_industry: str = ""


class NoticePeriodRequirement(BaseModel):
    required: str = ""
    preferred: str = ""


class LocationRequirement(BaseModel):
    city: str = ""
    state: str = ""
    country: str = ""
    remote_option: str = ""


class JobRequirements(BaseModel):
    job_id: str = ""
    role: str = ""
    experience_required: ExperienceRequirement = Field(default_factory=ExperienceRequirement)
    notice_period: NoticePeriodRequirement = Field(default_factory=NoticePeriodRequirement)
    location: LocationRequirement = Field(default_factory=LocationRequirement)
    required_skills: List[str] = Field(default_factory=list)
    preferred_skills: List[str] = Field(default_factory=list)
    qualifications: List[str] = Field(default_factory=list)
    job_description: str = ""


class JobRequirementsSummary(BaseModel):
    role: str
    minimum_years: float
    maximum_years: float
    required_skills: List[str]
    preferred_skills: List[str]
    notice_period_required: str

    @classmethod
    def from_requirements(cls, requirements: JobRequirements) -> "JobRequirementsSummary":
        return cls(
            role=requirements.role,
            minimum_years=requirements.experience_required.minimum,
            maximum_years=requirements.experience_required.maximum,
            required_skills=requirements.required_skills,
            preferred_skills=requirements.preferred_skills,
            notice_period_required=requirements.notice_period.required,
        )


# ---------- structured resume ----------


class Contact(BaseModel):
    phone: Optional[str] = None
    email: Optional[str] = None
    linkedin: Optional[str] = None
    address: Optional[str] = None

    @field_validator("phone", "email", "linkedin", "address", mode="before")
    @classmethod
    def _text_or_none(cls, v: Any) -> Optional[str]:
        return _as_text(v) or None


class EducationEntry(BaseModel):
    degree: str = ""
    university: str = ""
    year: str = ""

    @field_validator("degree", "university", "year", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)


class WorkExperienceEntry(BaseModel):
    company: str = ""
    role: str = ""
    duration: str = ""

    @field_validator("company", "role", "duration", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)


class ProjectEntry(BaseModel):
    title: str = ""
    description: str = ""
    technologies: str = ""

    @field_validator("title", "description", "technologies", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)


class StructuredResume(BaseModel):
    full_name: str = ""
    contact: Contact = Field(default_factory=Contact)
    skills: List[str] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    work_experience: List[WorkExperienceEntry] = Field(default_factory=list)
    projects: List[ProjectEntry] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    notice_period: Optional[str] = None
    links: List[str] = Field(default_factory=list)
    total_experience_years: float = Field(0.0, ge=0)

    @field_validator("full_name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("notice_period", mode="before")
    @classmethod
    def _notice(cls, v: Any) -> Optional[str]:
        return _as_text(v) or None

    @field_validator("contact", mode="before")
    @classmethod
    def _contact(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("skills", "certifications", "links", mode="before")
    @classmethod
    def _text_list(cls, v: Any) -> List[str]:
        return _as_text_list(v)

    @field_validator("education", "work_experience", "projects", mode="before")
    @classmethod
    def _records(cls, v: Any) -> List[Any]:
        return _as_record_list(v)


# ---------- scoring ----------


class DetailedReasoning(BaseModel):
    skills_analysis: str = ""
    experience_analysis: str = ""
    education_analysis: str = ""
    notice_period_analysis: str = ""
    overall_analysis: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        if isinstance(v, (dict, list)):
            return str(v)
        return _as_text(v)


SCORE_FIELDS = (
    "skills_score",
    "experience_score",
    "education_score",
    "notice_period_score",
    "overall_profile_score",
)


class ScoreBreakdown(BaseModel):
    skills_score: float = Field(ge=0, le=100)
    experience_score: float = Field(ge=0, le=100)
    education_score: float = Field(ge=0, le=100)
    notice_period_score: float = Field(ge=0, le=100)
    overall_profile_score: float = Field(ge=0, le=100)
    final_score: int = Field(ge=0, le=100)
    detailed_reasoning: DetailedReasoning = Field(default_factory=DetailedReasoning)

    def component_scores(self) -> List[float]:
        return [getattr(self, name) for name in SCORE_FIELDS]


def compute_final_score(scores: List[float]) -> int:
    """Arithmetic mean of the component scores, rounded half-up to an integer."""
    if not scores:
        return 0
    return int(round_half_up(sum(scores) / len(scores)))


class EvaluationResult(BaseModel):
    parsed_data: StructuredResume
    ai_evaluation: ScoreBreakdown


# ---------- forms & submissions ----------


class FormField(BaseModel):
    id: str
    type: str = "text"
    label: str = ""
    required: bool = False
    options: List[str] = Field(default_factory=list)


class FormIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    fields: List[FormField]
    job_requirements: Optional[JobRequirements] = None


class Form(FormIn):
    id: str
    owner_id: str
    public_link: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SubmissionResponse(BaseModel):
    field_id: str = Field(validation_alias=AliasChoices("field_id", "fieldId"))
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)


class Submission(BaseModel):
    id: str
    form_id: str
    responses: List[SubmissionResponse]
    resume_url: Optional[str] = None
    ai_evaluation: Optional[ScoreBreakdown] = None
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SubmissionReceipt(BaseModel):
    success: bool
    message: str
    submission_id: str
    resume_url: Optional[str] = None


class RankingDimension(str, Enum):
    final_score = "finalScore"
    skills_score = "skillsScore"
    experience_score = "experienceScore"
    education_score = "educationScore"
    notice_period_score = "noticePeriodScore"
    overall_profile_score = "overallProfileScore"
    submission_date = "submissionDate"


class RankedSubmissions(BaseModel):
    form_id: str
    dimension: RankingDimension
    submissions: List[Submission]
    job_requirements_summary: Optional[JobRequirementsSummary] = None


@dataclass
class ResumeDocument:
    """An uploaded resume, read fully into memory exactly once."""

    filename: str
    content_type: str
    content: bytes
