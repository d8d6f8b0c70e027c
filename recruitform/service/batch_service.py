# recruitform/service/batch_service.py
from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from tqdm.asyncio import tqdm as tqdm_asyncio

from recruitform.model.schemas import EvaluationResult, JobRequirements
from recruitform.service.evaluation_service import EvaluationService

logger = logging.getLogger(__name__)


def load_requirements(path: Path) -> JobRequirements:
    """
    Read job requirements from JSON; accepts the bare object or one nested
    under "job_posting".
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict) and isinstance(data.get("job_posting"), dict):
        data = data["job_posting"]
    return JobRequirements.model_validate(data)


class BatchEvaluationService:
    """
    Evaluates resume files against one set of job requirements, concurrently,
    and writes per-candidate JSON next to each other in output_dir:
      - <name>_parsed.json:     the structured resume
      - <name>_evaluation.json: {"parsed_data": ..., "ai_evaluation": ...}
    """

    def __init__(self, evaluation_service: EvaluationService, max_concurrency: int = 5) -> None:
        self.evaluation_service = evaluation_service
        self.semaphore = asyncio.Semaphore(max_concurrency)

    # ---------- internals ----------

    async def _evaluate_file(
        self, path: Path, requirements: JobRequirements
    ) -> Optional[EvaluationResult]:
        async with self.semaphore:
            try:
                document = await asyncio.to_thread(path.read_bytes)
            except OSError as e:
                logger.warning("Skipping %s: %s", path, e)
                return None

            result = await self.evaluation_service.evaluate_document(document, requirements)
            if result is None:
                logger.warning("Skipping %s: evaluation failed.", path.name)
            return result

    @staticmethod
    def _output_name(path: Path, result: EvaluationResult) -> str:
        name = re.sub(r"\s+", "_", (result.parsed_data.full_name or "").strip())
        name = re.sub(r"[^A-Za-z0-9.-]", "_", name).strip("._")
        return name or path.stem

    @staticmethod
    def _write_json(path: Path, payload: Dict[str, Any]) -> None:
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    # ---------- public API ----------

    async def evaluate_files(
        self, paths: Sequence[Path], requirements: JobRequirements, output_dir: Path
    ) -> List[EvaluationResult]:
        """
        Evaluate every file, write the outputs, and return the successful
        results in input order.
        """
        tasks = [self._evaluate_file(Path(p), requirements) for p in paths]
        results = await tqdm_asyncio.gather(*tasks, desc="Evaluating resumes")

        output_dir.mkdir(parents=True, exist_ok=True)
        evaluated: List[EvaluationResult] = []
        for path, result in zip(paths, results):
            if result is None:
                continue
            name = self._output_name(Path(path), result)
            self._write_json(
                output_dir / f"{name}_parsed.json", result.parsed_data.model_dump(mode="json")
            )
            self._write_json(
                output_dir / f"{name}_evaluation.json", result.model_dump(mode="json")
            )
            evaluated.append(result)

        logger.info("Evaluated %d/%d resumes -> %s", len(evaluated), len(paths), output_dir)
        return evaluated
