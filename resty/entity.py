"""Headers and query parameters attached to a request."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict

EntityValue = Union[str, int, float, bool]


class RestEntityType(str, Enum):
    """Where an entity is placed on the outgoing request."""

    PARAMETER = "PARAMETER"
    HEADER = "HEADER"


def _to_value(value: EntityValue) -> str:
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RestEntity(BaseModel):
    """A named header or query parameter.

    Values are stored as strings whatever type they were given with, so
    ``RestEntity.with_parameter("page", 2)`` and
    ``RestEntity.with_parameter("page", "2")`` are equal.
    """

    model_config = ConfigDict(frozen=True)

    type: RestEntityType
    name: str
    value: str

    @classmethod
    def with_parameter(cls, name: str, value: EntityValue) -> "RestEntity":
        """Create a query parameter entity."""
        return cls(type=RestEntityType.PARAMETER, name=name, value=_to_value(value))

    @classmethod
    def with_header(cls, name: str, value: EntityValue) -> "RestEntity":
        """Create a header entity."""
        return cls(type=RestEntityType.HEADER, name=name, value=_to_value(value))

    @staticmethod
    def get_by_type(
        entities: Iterable["RestEntity"], type: RestEntityType
    ) -> List["RestEntity"]:
        """Return the entities of ``type``, keeping their order."""
        return [e for e in entities if e.type == type]

    def as_pair(self) -> tuple[str, str]:
        return self.name, self.value


# Explicit "nothing to send" markers
NO_ENTITY = None
NO_BODY = None


@dataclass
class TypedRestEntity:
    """Entities of a request split into headers and parameters."""

    headers: List[RestEntity] = field(default_factory=list)
    parameters: List[RestEntity] = field(default_factory=list)

    @classmethod
    def build_from_entities(
        cls, entities: Optional[Iterable[Optional[RestEntity]]]
    ) -> "TypedRestEntity":
        """Split ``entities`` by type.

        ``None`` entries are skipped so ``NO_ENTITY`` can be passed where an
        entity is expected.
        """
        if entities is None:
            return cls()

        present = [e for e in entities if e is not None]
        return cls(
            headers=RestEntity.get_by_type(present, RestEntityType.HEADER),
            parameters=RestEntity.get_by_type(present, RestEntityType.PARAMETER),
        )

    def header_pairs(self) -> List[tuple[str, str]]:
        return [h.as_pair() for h in self.headers]

    def parameter_pairs(self) -> List[tuple[str, str]]:
        return [p.as_pair() for p in self.parameters]
