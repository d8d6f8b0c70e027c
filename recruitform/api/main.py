from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import uvicorn
from dotenv import find_dotenv, load_dotenv
from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, UploadFile
from fastapi import Form as FormBody
from fastapi.middleware.cors import CORSMiddleware
from pydantic import TypeAdapter, ValidationError

from recruitform.config import LOG_LEVEL, get_storage_config
from recruitform.model.schemas import (
    Form,
    FormIn,
    RankedSubmissions,
    RankingDimension,
    ResumeDocument,
    SubmissionReceipt,
    SubmissionResponse,
)
from recruitform.service.blob_store import LocalBlobStore
from recruitform.service.evaluation_service import EvaluationService
from recruitform.service.llm_manager import LLMManager
from recruitform.service.ranking_service import RankingService
from recruitform.service.repository import FormRepository, SubmissionRepository


logger = logging.getLogger(__name__)

load_dotenv(find_dotenv(), override=False)

_responses_adapter = TypeAdapter(List[SubmissionResponse])

# What a candidate may see of a form
_PUBLIC_FORM_EXCLUDE = {"owner_id", "job_requirements"}


app = FastAPI(
    title="Recruitment Form API",
    description="Candidate application forms with AI resume evaluation and ranking for HR.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup() -> None:
    """
    Initialize shared services once and keep them on app.state.
    """
    try:
        logger.info("Initializing services...")
        storage = get_storage_config()
        forms = FormRepository(storage.DATA_DIR)
        submissions = SubmissionRepository(storage.DATA_DIR)
        blob_store = LocalBlobStore(storage.BLOB_DIR, storage.PUBLIC_BASE_URL)
    except Exception:
        app.state.form_repository = None
        app.state.evaluation_service = None
        app.state.ranking_service = None
        logger.critical("Failed to initialize storage", exc_info=True)
        return

    try:
        llm: Optional[LLMManager] = LLMManager()
    except Exception:
        llm = None
        logger.critical(
            "Failed to initialize the language model; submissions will be saved unscored.",
            exc_info=True,
        )

    app.state.form_repository = forms
    app.state.evaluation_service = EvaluationService(
        llm_manager=llm, blob_store=blob_store, submissions=submissions
    )
    app.state.ranking_service = RankingService(submissions=submissions)
    logger.info("Services initialized.")


def _service(name: str, label: str) -> Any:
    service = getattr(app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} is not available.")
    return service


async def get_hr_user(x_hr_user_id: Optional[str] = Header(None)) -> str:
    """HR identity established by the upstream auth layer."""
    if not x_hr_user_id:
        raise HTTPException(status_code=401, detail="No HR identity, authorization denied")
    return x_hr_user_id


def _parse_responses(raw: Optional[str]) -> List[SubmissionResponse]:
    if not raw:
        raise HTTPException(status_code=400, detail="Missing form responses")
    try:
        return _responses_adapter.validate_python(json.loads(raw))
    except (ValueError, ValidationError) as e:
        logger.warning("Failed to parse responses: %s", e)
        raise HTTPException(status_code=400, detail="Invalid response format")


async def _read_resume(resume: Optional[UploadFile]) -> Optional[ResumeDocument]:
    """Read the upload fully into memory once; the handle is released either way."""
    if resume is None:
        return None
    try:
        content = await resume.read()
    finally:
        await resume.close()

    if not content and not resume.filename:
        return None
    return ResumeDocument(
        filename=resume.filename or "resume",
        content_type=resume.content_type or "application/octet-stream",
        content=content,
    )


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Simple health check (reports if core services are up)."""
    ok = getattr(app.state, "evaluation_service", None) is not None
    return {"status": "ok" if ok else "degraded"}


@app.post("/api/forms", response_model=Form, status_code=201)
async def create_form(form_in: FormIn, hr_user: str = Depends(get_hr_user)) -> Form:
    forms: FormRepository = _service("form_repository", "Form storage")
    try:
        return await forms.create(form_in, owner_id=hr_user)
    except Exception as e:
        logger.error("Form creation failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Server error during form creation")


@app.get("/api/forms", response_model=List[Form])
async def list_forms(hr_user: str = Depends(get_hr_user)) -> List[Form]:
    forms: FormRepository = _service("form_repository", "Form storage")
    return await forms.list_by_owner(hr_user)


@app.get(
    "/api/forms/public/{unique_id}",
    response_model=Form,
    response_model_exclude=_PUBLIC_FORM_EXCLUDE,
)
async def get_public_form(unique_id: str) -> Form:
    forms: FormRepository = _service("form_repository", "Form storage")
    form = await forms.get_by_public_link(unique_id)
    if form is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


@app.post("/api/submit/{form_id}", response_model=SubmissionReceipt, status_code=201)
async def submit_form(
    form_id: str,
    responses: Optional[str] = FormBody(None),
    resume: Optional[UploadFile] = File(None),
) -> SubmissionReceipt:
    """
    Accept a candidate's application. AI evaluation problems never reject a
    submission; only bad responses or an unknown form do.
    """
    forms: FormRepository = _service("form_repository", "Form storage")
    evaluation_service: EvaluationService = _service("evaluation_service", "Submission service")

    logger.info("Form submission received for form ID: %s", form_id)
    parsed = _parse_responses(responses)
    form = await forms.get(form_id)
    if form is None:
        raise HTTPException(status_code=404, detail="Form not found")

    try:
        document = await _read_resume(resume)
        submission = await evaluation_service.process_submission(form, parsed, document)
        return SubmissionReceipt(
            success=True,
            message="Form submitted successfully",
            submission_id=submission.id,
            resume_url=submission.resume_url,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Form submission failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Server error during form submission")


@app.get("/api/submissions/{form_id}", response_model=RankedSubmissions)
async def get_submissions(
    form_id: str,
    dimension: Optional[RankingDimension] = Query(
        None, description="Sort key; defaults to finalScore when any submission is scored"
    ),
    hr_user: str = Depends(get_hr_user),
) -> RankedSubmissions:
    """
    The form's submissions, best first, for the HR dashboard.
    """
    forms: FormRepository = _service("form_repository", "Form storage")
    ranking_service: RankingService = _service("ranking_service", "Ranking service")

    form = await forms.get(form_id)
    if form is None or form.owner_id != hr_user:
        raise HTTPException(status_code=403, detail="Not authorized to access this form")

    try:
        return await ranking_service.rank_form(form, dimension)
    except Exception as e:
        logger.error("Get submissions failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Server Error")


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    uvicorn.run("recruitform.api.main:app", host="0.0.0.0", port=8000, reload=True)
