"""Metric record model."""

from typing import List, Tuple, Union

from pydantic import BaseModel, Field

FieldValue = Union[int, float]


class MetricRecord(BaseModel):
    """One line of line protocol output.

    Tag values are stored unescaped; escaping happens on serialization.
    """

    measurement: str = Field(..., description="Measurement name")
    tags: List[Tuple[str, str]] = Field(default_factory=list, description="Ordered tag pairs")
    fields: List[Tuple[str, FieldValue]] = Field(
        default_factory=list, description="Ordered field pairs"
    )
    timestamp: int = Field(..., ge=0, description="Nanoseconds since the epoch")

    class Config:
        """Pydantic configuration."""

        frozen = True

    def tag(self, key: str) -> str:
        """Return the value of the first tag named ``key``."""
        for name, value in self.tags:
            if name == key:
                return value
        raise KeyError(key)

    def field(self, key: str) -> FieldValue:
        """Return the value of the first field named ``key``."""
        for name, value in self.fields:
            if name == key:
                return value
        raise KeyError(key)
