from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union
from uuid import uuid4

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Record = Union[BaseModel, Mapping[str, Any]]
Rows = List[Dict[str, Any]]


def _json_default(o: Any) -> Any:
    if isinstance(o, (date, datetime)):
        return o.isoformat()
    return str(o)


class JsonRepository:
    """
    Collection JSON (products.json, invoices.json) : une liste de documents
    indexés par `key`.
    - écriture atomique (fichier temporaire puis os.replace)
    - copie horodatée dans data/backups/ avant chaque écriture, `backup_keep` gardées
    - fichier illisible mis de côté en .corrupt.json, collection vide
    - transaction() : lecture / modification / écriture sous un seul verrou
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        entity_name: str = "entity",
        key: str = "id",
        *,
        backup_enabled: bool = True,
        backup_keep: int = 5,
    ) -> None:
        self.filepath = Path(filepath)
        self.entity_name = entity_name
        self.key = key
        self.backup_enabled = backup_enabled
        self.backup_keep = max(0, int(backup_keep))
        self.backup_dir = self.filepath.parent / "backups"
        self._lock = threading.RLock()

        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        if not self.filepath.exists():
            self._dump([])

    # ---------------- fichier ---------------- #

    def _load(self) -> Rows:
        try:
            raw = self.filepath.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            quarantine = self.filepath.with_suffix(".corrupt.json")
            logger.warning("%s is not valid JSON, moved aside to %s", self.filepath, quarantine)
            shutil.copy2(self.filepath, quarantine)
            return []
        if not isinstance(data, list):
            logger.warning("%s does not hold a list, ignoring its content", self.filepath)
            return []
        return data

    def _backup(self) -> None:
        if not (self.backup_enabled and self.backup_keep and self.filepath.exists()):
            return
        self.backup_dir.mkdir(exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        shutil.copy2(self.filepath, self.backup_dir / f"{self.filepath.stem}.{ts}.json")
        snapshots = sorted(self.backup_dir.glob(f"{self.filepath.stem}.*.json"))
        for old in snapshots[: max(0, len(snapshots) - self.backup_keep)]:
            old.unlink(missing_ok=True)

    def _dump(self, rows: Iterable[Mapping[str, Any]]) -> None:
        text = json.dumps(list(rows), ensure_ascii=False, indent=2, default=_json_default)
        if self.filepath.exists() and self.filepath.read_text(encoding="utf-8") == text:
            return
        self._backup()
        fd, tmp = tempfile.mkstemp(dir=self.filepath.parent, prefix=f".{self.filepath.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.filepath)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    @staticmethod
    def _to_dict(item: Record) -> Dict[str, Any]:
        if isinstance(item, BaseModel):
            return item.model_dump(mode="json")
        return dict(item)

    def _position(self, rows: Rows, obj_id: Any) -> Optional[int]:
        for idx, row in enumerate(rows):
            if str(row.get(self.key)) == str(obj_id):
                return idx
        return None

    @contextmanager
    def transaction(self) -> Iterator[Rows]:
        """Liste modifiable en place, réécrite à la sortie si aucune exception."""
        with self._lock:
            rows = self._load()
            yield rows
            self._dump(rows)

    # ---------------- lecture ---------------- #

    def list_all(self) -> Rows:
        with self._lock:
            return self._load()

    def get_by_id(self, obj_id: Any) -> Optional[Dict[str, Any]]:
        rows = self.list_all()
        idx = self._position(rows, obj_id)
        return None if idx is None else rows[idx]

    # ---------------- écriture ---------------- #

    def add(self, item: Record) -> Dict[str, Any]:
        record = self._to_dict(item)
        record.setdefault(self.key, None)
        if not record[self.key]:
            record[self.key] = uuid4().hex
        with self.transaction() as rows:
            if self._position(rows, record[self.key]) is not None:
                raise ValueError(f"{self.entity_name} with {self.key}={record[self.key]} already exists")
            rows.append(record)
        return record

    def update(self, item: Record) -> Dict[str, Any]:
        record = self._to_dict(item)
        obj_id = record.get(self.key)
        if not obj_id:
            raise ValueError(f"Cannot update {self.entity_name} without '{self.key}'")
        with self.transaction() as rows:
            idx = self._position(rows, obj_id)
            if idx is None:
                raise ValueError(f"{self.entity_name} with {self.key}={obj_id} not found")
            rows[idx] = {**rows[idx], **record}
            return rows[idx]

    def delete(self, obj_id: Any) -> bool:
        return self.delete_many([obj_id]) == 1

    def delete_many(self, obj_ids: Iterable[Any]) -> int:
        wanted = {str(i) for i in obj_ids}
        with self.transaction() as rows:
            before = len(rows)
            rows[:] = [r for r in rows if str(r.get(self.key)) not in wanted]
            return before - len(rows)

    def replace_all(self, items: Iterable[Record]) -> None:
        with self.transaction() as rows:
            rows[:] = [self._to_dict(it) for it in items]
