# recruitform/service/evaluation_service.py
from __future__ import annotations

import asyncio
import logging
import uuid
from enum import Enum
from typing import List, Optional

from recruitform.errors import EvaluationError, GatewayError, UploadError
from recruitform.model.schemas import (
    EvaluationResult,
    Form,
    JobRequirements,
    ResumeDocument,
    Submission,
    SubmissionResponse,
)
from recruitform.service.blob_store import LocalBlobStore, resume_key
from recruitform.service.llm_manager import LLMManager
from recruitform.service.repository import SubmissionRepository
from recruitform.service.resume_scorer import ResumeScorer
from recruitform.service.resume_structurer import ResumeStructurer
from recruitform.service.text_extractor import extract_links, extract_text

logger = logging.getLogger(__name__)

UPLOAD_FAILED_MARKER = "Error uploading file"


class EvaluationStage(str, Enum):
    extracting = "extracting"
    structuring = "structuring"
    scoring = "scoring"


class EvaluationService:
    """
    Turns a candidate's intake into a persisted Submission:
      - extract -> structure -> score, only when a resume was uploaded AND
        the form has job requirements
      - any stage failure leaves ai_evaluation as None; the submission is
        saved regardless
      - the resume bytes are stored in the blob store independently
    The blob store and repository are only needed for process_submission;
    evaluate_document works without them.
    """

    def __init__(
        self,
        llm_manager: Optional[LLMManager],
        blob_store: Optional[LocalBlobStore] = None,
        submissions: Optional[SubmissionRepository] = None,
    ) -> None:
        # Without a model, submissions are still accepted, just never scored
        self.structurer = ResumeStructurer(llm_manager) if llm_manager is not None else None
        self.scorer = ResumeScorer(llm_manager) if llm_manager is not None else None
        self.blob_store = blob_store
        self.submissions = submissions

    # ---------- internals ----------

    async def _run_pipeline(
        self, document: bytes, requirements: JobRequirements
    ) -> EvaluationResult:
        if self.structurer is None or self.scorer is None:
            raise GatewayError("No language model configured.")

        stage = EvaluationStage.extracting
        try:
            text = await asyncio.to_thread(extract_text, document)

            stage = EvaluationStage.structuring
            resume = await self.structurer.structure(text)
            resume.links = extract_links(text)

            stage = EvaluationStage.scoring
            breakdown = await self.scorer.score(resume, requirements)
        except EvaluationError as e:
            e.stage = stage.value
            raise

        return EvaluationResult(parsed_data=resume, ai_evaluation=breakdown)

    async def _store_document(self, document: ResumeDocument) -> str:
        try:
            return await self.blob_store.put(
                document.content, document.content_type, resume_key(document.filename)
            )
        except UploadError as e:
            logger.error("Resume upload failed for %s: %s", document.filename, e)
            return UPLOAD_FAILED_MARKER

    # ---------- public API ----------

    async def evaluate_document(
        self, document: bytes, requirements: JobRequirements
    ) -> Optional[EvaluationResult]:
        """
        Run the full pipeline over one document. Returns None if any stage fails.
        """
        try:
            return await self._run_pipeline(document, requirements)
        except EvaluationError as e:
            logger.warning(
                "Resume evaluation failed while %s (%s): %s",
                e.stage or "evaluating",
                type(e).__name__,
                e,
            )
            return None
        except Exception as e:
            logger.error("Unhandled error evaluating resume: %s", e, exc_info=True)
            return None

    async def process_submission(
        self,
        form: Form,
        responses: List[SubmissionResponse],
        document: Optional[ResumeDocument] = None,
    ) -> Submission:
        """
        Evaluate (when possible), store the resume, and persist the submission
        exactly once.
        """
        if self.blob_store is None or self.submissions is None:
            raise RuntimeError("Submission intake needs a blob store and a submission repository.")

        result: Optional[EvaluationResult] = None
        if document is None:
            logger.info("Submission to form %s has no resume; skipping evaluation.", form.id)
        elif form.job_requirements is None:
            logger.info("Form %s has no job requirements; skipping evaluation.", form.id)
        elif self.structurer is None:
            logger.warning("Evaluation is unavailable; saving submission to %s unscored.", form.id)
        else:
            result = await self.evaluate_document(document.content, form.job_requirements)

        resume_url = await self._store_document(document) if document is not None else None

        submission = Submission(
            id=uuid.uuid4().hex,
            form_id=form.id,
            responses=responses,
            resume_url=resume_url,
            ai_evaluation=result.ai_evaluation if result else None,
        )
        await self.submissions.add(submission)
        logger.info(
            "Saved submission %s for form %s (score=%s, resume=%s)",
            submission.id,
            form.id,
            submission.ai_evaluation.final_score if submission.ai_evaluation else None,
            "yes" if resume_url else "no",
        )
        return submission
