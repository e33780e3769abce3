"""Sentinel returned by analyzers that do not have enough records to run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class InsufficientData:
    analysis: str
    required: int
    available: int
    unit: str = "day-records"

    insufficient_data = True

    @property
    def message(self) -> str:
        return (f"{self.analysis} needs at least {self.required} {self.unit} "
                f"(have {self.available}).")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "insufficient_data": True,
            "analysis": self.analysis,
            "required": self.required,
            "data_count": self.available,
            "message": self.message,
        }


def is_insufficient(result: Any) -> bool:
    return isinstance(result, InsufficientData)
