from __future__ import annotations

import logging
import math
from typing import Any, Dict

from pydantic import ValidationError

from recruitform.errors import ScoringError
from recruitform.model.schemas import (
    SCORE_FIELDS,
    DetailedReasoning,
    JobRequirements,
    ScoreBreakdown,
    StructuredResume,
    compute_final_score,
)
from recruitform.prompts.prompts import RESUME_SCORING_PROMPT
from recruitform.service.llm_manager import LLMManager, load_json_reply

logger = logging.getLogger(__name__)


def _coerce_score(name: str, value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise ScoringError(f"Missing or non-numeric {name}: {value!r}")
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        score = float(value)
    except (TypeError, ValueError) as e:
        raise ScoringError(f"Non-numeric {name}: {value!r}") from e
    if math.isnan(score):
        raise ScoringError(f"Non-numeric {name}: {value!r}")
    return max(0.0, min(100.0, score))


def build_breakdown(payload: Dict[str, Any]) -> ScoreBreakdown:
    """
    Validate a scoring reply and normalise it into a ScoreBreakdown.

    Accepts the nested {"breakdown": {...}} reply as well as the flat output
    shape. Whatever final_score the reply carries is discarded and recomputed.
    """
    scores_src = payload.get("breakdown", payload)
    if not isinstance(scores_src, dict):
        raise ScoringError("Scoring reply 'breakdown' is not an object.")

    scores = {name: _coerce_score(name, scores_src.get(name)) for name in SCORE_FIELDS}

    reasoning_src = payload.get("detailed_reasoning") or {}
    if not isinstance(reasoning_src, dict):
        raise ScoringError("Scoring reply 'detailed_reasoning' is not an object.")

    try:
        reasoning = DetailedReasoning.model_validate(reasoning_src)
        return ScoreBreakdown(
            **scores,
            final_score=compute_final_score(list(scores.values())),
            detailed_reasoning=reasoning,
        )
    except ValidationError as e:
        raise ScoringError(f"Scoring reply has the wrong shape: {e}") from e


class ResumeScorer:
    """Scores a StructuredResume against a form's JobRequirements."""

    def __init__(self, llm_manager: LLMManager) -> None:
        self.llm_manager = llm_manager

    def _build_prompt(self, resume: StructuredResume, requirements: JobRequirements) -> str:
        try:
            resume_json = resume.model_dump_json(indent=2, exclude={"links"})
            requirements_json = requirements.model_dump_json(indent=2)
        except Exception as e:
            raise ScoringError(f"Cannot serialise scoring inputs: {e}") from e
        return RESUME_SCORING_PROMPT.format(
            resume_json=resume_json, requirements_json=requirements_json
        )

    async def score(
        self, resume: StructuredResume, requirements: JobRequirements
    ) -> ScoreBreakdown:
        """
        Raises:
            GatewayError: The model call itself failed.
            ScoringError: Bad inputs, or a reply that is not a usable breakdown.
        """
        prompt = self._build_prompt(resume, requirements)
        reply = await self.llm_manager.complete(prompt)

        try:
            payload = load_json_reply(reply)
        except ValueError as e:
            raise ScoringError(f"Scoring reply is not valid JSON: {e}") from e

        breakdown = build_breakdown(payload)
        if payload.get("final_score") not in (None, breakdown.final_score):
            logger.info(
                "Model final_score %r replaced by recomputed %d.",
                payload.get("final_score"),
                breakdown.final_score,
            )
        logger.info(
            "Scored %s for %s: %d/100",
            resume.full_name or "<unnamed>",
            requirements.role or "<role>",
            breakdown.final_score,
        )
        return breakdown
