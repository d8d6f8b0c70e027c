from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

import fitz
import pytest

from recruitform.model.schemas import (
    DetailedReasoning,
    JobRequirements,
    ScoreBreakdown,
    Submission,
    SubmissionResponse,
    compute_final_score,
)

STRUCTURING_REPLY = """```json
{
  "full_name": "Jane Doe",
  "contact": {"phone": "+1 555 0100", "email": "jane@example.com", "linkedin": null, "address": null},
  "skills": ["Python", "FastAPI", "SQL"],
  "education": [{"degree": "B.Tech Computer Science", "university": "IIT Delhi", "year": 2018}],
  "work_experience": [
    {"company": "Acme", "role": "Backend Engineer", "duration": "2 years 3 months"},
    {"company": "Globex", "role": "Intern", "duration": "1 year"}
  ],
  "projects": [{"title": "Resume Ranker", "description": "Ranks resumes", "technologies": ["Python", "FastAPI"]}],
  "certifications": ["AWS Certified Developer"],
  "notice_period": "30 days",
  "total_experience_years": 42
}
```"""

SCORING_REPLY = """```json
{
  "breakdown": {
    "skills_score": 80,
    "experience_score": 70,
    "education_score": 90,
    "notice_period_score": 60,
    "overall_profile_score": 75
  },
  "final_score": 99,
  "detailed_reasoning": {
    "skills_analysis": "Strong Python and FastAPI.",
    "experience_analysis": "Slightly above the minimum.",
    "education_analysis": "Relevant degree.",
    "notice_period_analysis": "30 days against 15 required.",
    "overall_analysis": "Good fit."
  }
}
```"""

RESUME_TEXT = (
    "Jane Doe\n"
    "jane@example.com | https://github.com/janedoe\n"
    "Backend Engineer at Acme, 2 years 3 months\n"
    "Skills: Python, FastAPI, SQL"
)

Reply = Union[str, Exception]


class FakeLLM:
    """
    Stands in for LLMManager. Routes structuring and scoring prompts to their
    own canned replies and records every prompt it receives.
    """

    def __init__(self, structuring: Reply = STRUCTURING_REPLY, scoring: Reply = SCORING_REPLY):
        self.structuring = structuring
        self.scoring = scoring
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.scoring if "Scoring Rubric" in prompt else self.structuring
        if isinstance(reply, Exception):
            raise reply
        return reply


def make_pdf(text: Optional[str] = RESUME_TEXT) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    if text:
        page.insert_text((72, 72), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


def make_submission(
    submission_id: str,
    score: Optional[float] = None,
    submitted_at: Optional[datetime] = None,
    form_id: str = "form-1",
    **overrides: float,
) -> Submission:
    evaluation = None
    if score is not None:
        components = {
            "skills_score": score,
            "experience_score": score,
            "education_score": score,
            "notice_period_score": score,
            "overall_profile_score": score,
        }
        components.update(overrides)
        evaluation = ScoreBreakdown(
            **components,
            final_score=compute_final_score(list(components.values())),
            detailed_reasoning=DetailedReasoning(),
        )
    return Submission(
        id=submission_id,
        form_id=form_id,
        responses=[SubmissionResponse(field_id="1", value=f"Candidate {submission_id}")],
        ai_evaluation=evaluation,
        submitted_at=submitted_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def requirements() -> JobRequirements:
    return JobRequirements.model_validate(
        {
            "job_id": "BE-42",
            "role": "Backend Engineer",
            "experience_required": {"minimum": 2, "maximum": 5, "preferred_industry": "SaaS"},
            "notice_period": {"required": "15 days", "preferred": "Immediate"},
            "required_skills": ["Python", "FastAPI"],
            "preferred_skills": ["Docker"],
            "qualifications": ["B.Tech Computer Science"],
            "job_description": "Build and run our APIs.",
        }
    )


@pytest.fixture
def resume_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def base_time() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def later(base_time):
    def _later(minutes: int) -> datetime:
        return base_time + timedelta(minutes=minutes)

    return _later
