import asyncio

import pytest

from conftest import make_submission
from recruitform.model.schemas import Form, FormField, RankingDimension
from recruitform.service.ranking_service import RankingService
from recruitform.service.repository import SubmissionRepository


def _ids(submissions):
    return [s.id for s in submissions]


@pytest.fixture
def submissions(later):
    return [
        make_submission("a", score=60, submitted_at=later(0), skills_score=90),
        make_submission("b", score=None, submitted_at=later(30)),
        make_submission("c", score=85, submitted_at=later(10), skills_score=40),
        make_submission("d", score=70, submitted_at=later(20)),
    ]


def test_rank_by_final_score_descending(submissions):
    ranked = RankingService.rank(submissions, RankingDimension.final_score)

    assert _ids(ranked) == ["c", "d", "a", "b"]


def test_rank_by_component_score(submissions):
    ranked = RankingService.rank(submissions, RankingDimension.skills_score)

    assert _ids(ranked) == ["a", "d", "c", "b"]


def test_rank_by_submission_date_most_recent_first(submissions):
    ranked = RankingService.rank(submissions, RankingDimension.submission_date)

    assert _ids(ranked) == ["b", "d", "c", "a"]


def test_unscored_submissions_are_kept_below_scored_ones(later):
    subs = [
        make_submission("none-1", score=None, submitted_at=later(5)),
        make_submission("zero", score=0, submitted_at=later(1)),
        make_submission("low", score=3, submitted_at=later(2)),
        make_submission("none-2", score=None, submitted_at=later(3)),
    ]

    ranked = RankingService.rank(subs, RankingDimension.final_score)

    assert _ids(ranked) == ["low", "zero", "none-1", "none-2"]


def test_unscored_submission_ranks_below_a_real_zero(later):
    subs = [
        make_submission("none", score=None, submitted_at=later(10)),
        make_submission("zero", score=0, submitted_at=later(0)),
    ]

    for dimension in (RankingDimension.final_score, RankingDimension.skills_score):
        assert _ids(RankingService.rank(subs, dimension)) == ["zero", "none"]


@pytest.mark.parametrize("dimension", list(RankingDimension))
def test_ranking_is_idempotent(submissions, dimension):
    once = RankingService.rank(submissions, dimension)

    assert RankingService.rank(once, dimension) == once


def test_rank_does_not_mutate_input(submissions):
    before = list(submissions)

    RankingService.rank(submissions, RankingDimension.final_score)

    assert submissions == before


def test_default_dimension(submissions, later):
    assert RankingService.default_dimension(submissions) is RankingDimension.final_score
    assert _ids(RankingService.rank(submissions)) == ["c", "d", "a", "b"]

    unscored = [
        make_submission("x", submitted_at=later(1)),
        make_submission("y", submitted_at=later(2)),
    ]
    assert RankingService.default_dimension(unscored) is RankingDimension.submission_date
    assert _ids(RankingService.rank(unscored)) == ["y", "x"]
    assert RankingService.rank([]) == []


def test_rank_form_loads_and_summarises(tmp_path, submissions, requirements):
    repo = SubmissionRepository(tmp_path)
    for submission in submissions:
        asyncio.run(repo.add(submission))
    asyncio.run(repo.add(make_submission("other-form", score=99, form_id="form-2")))
    form = Form(
        id="form-1",
        owner_id="hr-1",
        title="Backend Engineer",
        fields=[FormField(id="1", label="Name")],
        job_requirements=requirements,
        public_link="/form/abc123",
    )

    result = asyncio.run(RankingService(repo).rank_form(form))

    assert result.dimension is RankingDimension.final_score
    assert _ids(result.submissions) == ["c", "d", "a", "b"]
    assert result.job_requirements_summary.role == "Backend Engineer"
    assert result.job_requirements_summary.minimum_years == 2
    assert result.job_requirements_summary.required_skills == ["Python", "FastAPI"]
