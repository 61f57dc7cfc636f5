"""Data models consumed and produced by the diff analyzer."""

from typing import Any, Literal

from pydantic import BaseModel


class GroupedEndpoint(BaseModel):
    """One logical endpoint with the shapes of its observed response bodies.

    Only method, path and shapes are read by the analyzer; the rest is
    informational.
    """

    method: str
    path: str
    shapes: list[Any]
    request_count: int = 0
    first_seen: int = 0  # epoch ms
    last_seen: int = 0  # epoch ms
    status_codes: list[int] = []
    avg_duration: float = 0.0

    @property
    def endpoint(self) -> str:
        return f"{self.method} {self.path}"


class Inconsistency(BaseModel):
    """A single cross-response inconsistency at one field path."""

    kind: Literal["missing", "type_conflict"]
    path: str
    total: int  # number of shapes compared
    missing_count: int = 0
    types: list[str] = []  # first-seen order

    @property
    def message(self) -> str:
        if self.kind == "missing":
            plural = "s" if self.missing_count > 1 else ""
            return f"field '{self.path}' missing in {self.missing_count} response{plural}"
        return f"field '{self.path}' has inconsistent types: {', '.join(self.types)}"


class EndpointDiffAnalysis(BaseModel):
    """Result of comparing every observed shape of one endpoint."""

    endpoint: str  # "METHOD path"
    method: str
    path: str
    shapes: list[Any]
    total_shapes: int
    inconsistencies: list[Inconsistency] = []

    @property
    def messages(self) -> list[str]:
        return [item.message for item in self.inconsistencies]

    @property
    def missing_fields(self) -> list[Inconsistency]:
        return [item for item in self.inconsistencies if item.kind == "missing"]

    @property
    def type_conflicts(self) -> list[Inconsistency]:
        return [item for item in self.inconsistencies if item.kind == "type_conflict"]

    @property
    def has_inconsistencies(self) -> bool:
        return bool(self.inconsistencies)
