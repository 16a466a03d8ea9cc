"""Pydantic data models for minirag."""

import math
from functools import total_ordering
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

PayloadValue = str | int | float | bool


class Chunk(BaseModel):
    """A token-bounded slice of source text, as emitted by the chunker."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    text: str
    token_count: int = Field(ge=0)


@total_ordering
class _PointIdBase(BaseModel):
    """
    Shared ordering for point ids.

    Every numeric id sorts before every string id; within one kind the natural
    order of the value applies.
    """

    model_config = ConfigDict(frozen=True)

    rank: ClassVar[int]

    def sort_key(self) -> tuple[int, Any]:
        return (self.rank, self.value)  # type: ignore[attr-defined]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, _PointIdBase):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return str(self.value)  # type: ignore[attr-defined]


class NumericId(_PointIdBase):
    """Unsigned integer point id."""

    rank: ClassVar[int] = 0

    kind: Literal["num"] = "num"
    value: int = Field(ge=0)


class StringId(_PointIdBase):
    """String point id (for example a UUID)."""

    rank: ClassVar[int] = 1

    kind: Literal["str"] = "str"
    value: str = Field(min_length=1)


PointId = Annotated[Union[NumericId, StringId], Field(discriminator="kind")]
PointIdLike = NumericId | StringId | int | str


def as_point_id(value: PointIdLike) -> NumericId | StringId:
    """
    Coerce a raw id into a PointId.

    Args:
        value: An existing PointId, a non-negative int or a non-empty str

    Returns:
        NumericId or StringId

    Raises:
        TypeError: If the value is neither int nor str (bool is rejected)
    """
    if isinstance(value, (NumericId, StringId)):
        return value
    if isinstance(value, bool):
        raise TypeError("Point id cannot be a bool")
    if isinstance(value, int):
        return NumericId(value=value)
    if isinstance(value, str):
        return StringId(value=value)
    raise TypeError(f"Point id must be an int or str, got {type(value).__name__}")


class Point(BaseModel):
    """A vector with an id and optional payload, owned by one collection."""

    model_config = ConfigDict(frozen=True)

    id: PointId
    vector: list[float]
    payload: dict[str, PayloadValue] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Accept raw int/str ids."""
        if isinstance(v, (bool, int, str)):
            return as_point_id(v)
        return v

    @field_validator("vector")
    @classmethod
    def validate_vector(cls, v: list[float]) -> list[float]:
        """Reject empty and non-finite vectors."""
        if not v:
            raise ValueError("Vector cannot be empty")
        if not all(math.isfinite(x) for x in v):
            raise ValueError("Vector components must be finite")
        return v

    @property
    def dimension(self) -> int:
        return len(self.vector)


class ScoredPoint(BaseModel):
    """Search hit: a stored point and its similarity to the query."""

    point: Point
    score: float

    @property
    def id(self) -> NumericId | StringId:
        return self.point.id

    @property
    def payload(self) -> dict[str, PayloadValue] | None:
        return self.point.payload


class CollectionInfo(BaseModel):
    """Read-only snapshot of a collection."""

    name: str
    dimension: int
    points_count: int


# Ordered chunk texts handed to the generation collaborator.
RetrievalContext = list[str]


class IngestionResult(BaseModel):
    """Outcome of ingesting one text."""

    collection_name: str
    chunk_count: int
    dimension: int


class RAGAnswer(BaseModel):
    """Generated answer with the context it was grounded on."""

    query: str
    answer: str
    context: list[str] = Field(default_factory=list)
