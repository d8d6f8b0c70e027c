"""
Score resume PDFs against a job requirements file from the command line.

    recruitform-evaluate --requirements demo_req_hr.json --output-dir output_scrape cv1.pdf cv2.pdf
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from recruitform.config import LOG_LEVEL, get_storage_config
from recruitform.service.batch_service import BatchEvaluationService, load_requirements
from recruitform.service.evaluation_service import EvaluationService
from recruitform.service.llm_manager import LLMManager

logger = logging.getLogger(__name__)


def _collect(paths: List[Path]) -> List[Path]:
    files: List[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(path.glob("*.pdf")))
        else:
            files.append(path)
    return files


async def _run(args: argparse.Namespace) -> int:
    storage = get_storage_config()
    requirements = load_requirements(args.requirements)
    evaluation_service = EvaluationService(llm_manager=LLMManager())
    batch = BatchEvaluationService(
        evaluation_service, max_concurrency=args.concurrency or storage.MAX_CONCURRENCY
    )

    files = _collect(args.resumes)
    results = await batch.evaluate_files(files, requirements, args.output_dir)
    for result in results:
        score = result.ai_evaluation
        logger.info(
            "%s: skills %.0f | experience %.0f | education %.0f | notice %.0f | "
            "overall %.0f => final %d/100",
            result.parsed_data.full_name or "<unnamed>",
            score.skills_score,
            score.experience_score,
            score.education_score,
            score.notice_period_score,
            score.overall_profile_score,
            score.final_score,
        )
    return 0 if len(results) == len(files) else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("resumes", nargs="+", type=Path, help="PDF files or directories of PDFs")
    parser.add_argument("--requirements", required=True, type=Path, help="Job requirements JSON")
    parser.add_argument("--output-dir", type=Path, default=Path("output_scrape"))
    parser.add_argument("--concurrency", type=int, default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
