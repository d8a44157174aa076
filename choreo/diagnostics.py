"""Structured warning channel shared by every engine stage."""
from __future__ import annotations

from typing import Any, Iterator, List, Optional, Protocol, Tuple

from .models import SceneWarning
from .run_logger import format_warning


class LoggerLike(Protocol):
    def log(self, message: str) -> None:
        ...


class Diagnostics:
    def __init__(self, logger: Optional[LoggerLike] = None) -> None:
        self.logger = logger
        self._records: List[SceneWarning] = []

    def warn(
        self,
        stage: str,
        code: str,
        message: str,
        actor_id: Optional[str] = None,
        field: Optional[str] = None,
        value: Any = None,
        level: str = "warning",
    ) -> SceneWarning:
        record = SceneWarning(
            stage=stage,
            code=code,
            message=message,
            actor_id=actor_id,
            field=field,
            value=None if value is None else str(value),
            level=level,
        )
        self.add(record)
        return record

    def info(self, stage: str, code: str, message: str, **kwargs: Any) -> SceneWarning:
        return self.warn(stage, code, message, level="info", **kwargs)

    def add(self, record: SceneWarning) -> None:
        self._records.append(record)
        if self.logger is not None:
            self.logger.log(format_warning(record))

    def extend(self, records: List[SceneWarning]) -> None:
        for record in records:
            self.add(record)

    def codes(self) -> List[str]:
        return [r.code for r in self._records]

    def records(self) -> Tuple[SceneWarning, ...]:
        return tuple(self._records)

    def __iter__(self) -> Iterator[SceneWarning]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
