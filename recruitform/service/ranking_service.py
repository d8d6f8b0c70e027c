from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from recruitform.model.schemas import (
    Form,
    JobRequirementsSummary,
    RankedSubmissions,
    RankingDimension,
    Submission,
)
from recruitform.service.repository import SubmissionRepository

logger = logging.getLogger(__name__)

_SCORE_ATTRIBUTES: Dict[RankingDimension, str] = {
    RankingDimension.final_score: "final_score",
    RankingDimension.skills_score: "skills_score",
    RankingDimension.experience_score: "experience_score",
    RankingDimension.education_score: "education_score",
    RankingDimension.notice_period_score: "notice_period_score",
    RankingDimension.overall_profile_score: "overall_profile_score",
}


def _score_key(attribute: str) -> Callable[[Submission], Tuple[bool, float]]:
    def key(submission: Submission) -> Tuple[bool, float]:
        # Missing scores sort after every real score, including 0
        value = getattr(submission.ai_evaluation, attribute, None)
        if value is None:
            return (False, 0.0)
        return (True, float(value))

    return key


def _date_key(submission: Submission) -> datetime:
    return submission.submitted_at


class RankingService:
    def __init__(self, submissions: SubmissionRepository) -> None:
        self.submissions = submissions

    @staticmethod
    def default_dimension(submissions: Sequence[Submission]) -> RankingDimension:
        if any(s.ai_evaluation is not None for s in submissions):
            return RankingDimension.final_score
        return RankingDimension.submission_date

    @classmethod
    def rank(
        cls,
        submissions: Sequence[Submission],
        dimension: Optional[RankingDimension] = None,
    ) -> List[Submission]:
        """
        New list ordered highest first (most recent first for submissionDate).
        The sort is stable, so ranking an already ranked list changes nothing.
        """
        dimension = dimension or cls.default_dimension(submissions)
        if dimension is RankingDimension.submission_date:
            key = _date_key
        else:
            key = _score_key(_SCORE_ATTRIBUTES[dimension])
        return sorted(submissions, key=key, reverse=True)

    async def rank_form(
        self, form: Form, dimension: Optional[RankingDimension] = None
    ) -> RankedSubmissions:
        submissions = await self.submissions.list_by_form(form.id)
        dimension = dimension or self.default_dimension(submissions)
        ranked = self.rank(submissions, dimension)
        logger.info(
            "Ranked %d submissions for form %s by %s", len(ranked), form.id, dimension.value
        )

        summary = None
        if form.job_requirements is not None:
            summary = JobRequirementsSummary.from_requirements(form.job_requirements)

        return RankedSubmissions(
            form_id=form.id,
            dimension=dimension,
            submissions=ranked,
            job_requirements_summary=summary,
        )
