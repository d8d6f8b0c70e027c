from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from recruitform.model.schemas import Form, FormIn, Submission

logger = logging.getLogger(__name__)


class JsonListStore:
    """
    A JSON list on disk. Reads and writes run off the event loop; writes are
    serialised with a lock and land atomically via a temp file + rename.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{self.path} must contain a JSON list.")
        return data

    def _write(self, items: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)

    async def load(self) -> List[Dict[str, Any]]:
        async with self._lock:
            return await asyncio.to_thread(self._read)

    async def append(self, item: Dict[str, Any]) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
            items.append(item)
            await asyncio.to_thread(self._write, items)


class FormRepository:
    def __init__(self, data_dir: Path) -> None:
        self.store = JsonListStore(Path(data_dir) / "forms.json")

    async def create(self, form_in: FormIn, owner_id: str) -> Form:
        form = Form(
            **form_in.model_dump(),
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            public_link=f"/form/{uuid.uuid4().hex[:6]}",
        )
        await self.store.append(form.model_dump(mode="json"))
        logger.info("Created form %s (%s) for %s", form.id, form.title, owner_id)
        return form

    async def _all(self) -> List[Form]:
        return [Form.model_validate(item) for item in await self.store.load()]

    async def get(self, form_id: str) -> Optional[Form]:
        return next((f for f in await self._all() if f.id == form_id), None)

    async def get_by_public_link(self, unique_id: str) -> Optional[Form]:
        link = f"/form/{unique_id}"
        return next((f for f in await self._all() if f.public_link == link), None)

    async def list_by_owner(self, owner_id: str) -> List[Form]:
        return [f for f in await self._all() if f.owner_id == owner_id]


class SubmissionRepository:
    def __init__(self, data_dir: Path) -> None:
        self.store = JsonListStore(Path(data_dir) / "submissions.json")

    async def add(self, submission: Submission) -> Submission:
        await self.store.append(submission.model_dump(mode="json"))
        return submission

    async def list_by_form(self, form_id: str) -> List[Submission]:
        return [
            Submission.model_validate(item)
            for item in await self.store.load()
            if item.get("form_id") == form_id
        ]
