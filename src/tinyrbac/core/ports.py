from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class PolicySource(ABC):
    """Where a raw policy document comes from."""

    @abstractmethod
    def load(self) -> Dict[str, Any]: ...

    def etag(self) -> Optional[str]:
        """Identifier of the current document version, or None when unknown."""
        return None


class MetricsSink(ABC):
    @abstractmethod
    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None: ...


__all__ = ["PolicySource", "MetricsSink"]
