from __future__ import annotations

import logging
import re
from typing import Iterable

from pydantic import ValidationError

from recruitform.errors import StructuringError
from recruitform.model.schemas import StructuredResume, WorkExperienceEntry, round_half_up
from recruitform.prompts.prompts import RESUME_STRUCTURING_PROMPT
from recruitform.service.llm_manager import LLMManager, load_json_reply

logger = logging.getLogger(__name__)

_YEARS_RE = re.compile(r"(\d+)\s*years?", re.IGNORECASE)
_MONTHS_RE = re.compile(r"(\d+)\s*months?", re.IGNORECASE)

# Derived locally; never accepted from the model.
_DERIVED_FIELDS = ("total_experience_years", "links")


def total_experience_years(work_experience: Iterable[WorkExperienceEntry]) -> float:
    """
    Sum "N year(s)" and "N month(s)" tokens across all durations, in years,
    rounded half-up to one decimal. Durations without tokens count as zero.
    """
    total = 0.0
    for entry in work_experience:
        duration = entry.duration or ""
        years = _YEARS_RE.search(duration)
        months = _MONTHS_RE.search(duration)
        if years:
            total += int(years.group(1))
        if months:
            total += int(months.group(1)) / 12
    return round_half_up(total, 1)


class ResumeStructurer:
    """Turns extracted resume text into a validated StructuredResume."""

    def __init__(self, llm_manager: LLMManager) -> None:
        self.llm_manager = llm_manager

    async def structure(self, resume_text: str) -> StructuredResume:
        """
        Raises:
            GatewayError: The model call itself failed.
            StructuringError: The reply was not a usable resume record.
        """
        prompt = RESUME_STRUCTURING_PROMPT.format(resume_text=resume_text)
        reply = await self.llm_manager.complete(prompt)

        try:
            raw = load_json_reply(reply)
        except ValueError as e:
            raise StructuringError(f"Resume reply is not valid JSON: {e}") from e

        for name in _DERIVED_FIELDS:
            raw.pop(name, None)

        try:
            resume = StructuredResume.model_validate(raw)
        except ValidationError as e:
            raise StructuringError(
                f"Resume reply has the wrong shape: {e.error_count()} error(s)"
            ) from e

        resume.total_experience_years = total_experience_years(resume.work_experience)
        logger.info(
            "Structured resume for %s: %d skills, %d roles, %.1f years.",
            resume.full_name or "<unnamed>",
            len(resume.skills),
            len(resume.work_experience),
            resume.total_experience_years,
        )
        return resume

