"""Label and issue value objects shared by the engines and collaborators.

Labels are identified by name only. Colors are always stored normalized (lower-case
hex without a leading '#') so comparisons never depend on how a user or the API
spelled them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeAlias


def normalize_color(value: str) -> str:
    """Return `value` as lower-case hex without a leading '#'."""

    return value.strip().lstrip("#").lower()


@dataclass(frozen=True, slots=True)
class LabelSpec:
    """A label as declared in configuration."""

    name: str
    color: str
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", normalize_color(self.color))


@dataclass(frozen=True, slots=True)
class ObservedLabel:
    """A label as it currently exists in a repository."""

    name: str
    color: str
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", normalize_color(self.color))
        if self.description is None:
            object.__setattr__(self, "description", "")


@dataclass(frozen=True, slots=True)
class Issue:
    """Read-only snapshot of an open issue."""

    number: int
    title: str
    description: str = ""
    labels: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.labels, frozenset):
            object.__setattr__(self, "labels", frozenset(self.labels))

    def with_labels(self, names: Iterable[str]) -> Issue:
        """Return a copy of this issue with `names` added to its labels."""

        return Issue(
            number=self.number,
            title=self.title,
            description=self.description,
            labels=self.labels | frozenset(names),
        )


# Trigger label name -> sibling label names to ensure on the same issue.
SiblingRules: TypeAlias = Mapping[str, Sequence[str]]


class ChangeKind(str, Enum):
    ADDITION = "addition"
    UPDATE = "update"
    REMOVAL = "removal"
    UNCHANGED = "unchanged"


class ChangedField(str, Enum):
    COLOR = "color"
    DESCRIPTION = "description"


@dataclass(frozen=True, slots=True)
class Addition:
    spec: LabelSpec

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def kind(self) -> ChangeKind:
        return ChangeKind.ADDITION


@dataclass(frozen=True, slots=True)
class Update:
    """A declared label whose color or description differs from the repository.

    `changed_fields` is informational. Applying an update always replaces both
    color and description with the values from `spec`.
    """

    spec: LabelSpec
    observed: ObservedLabel
    changed_fields: frozenset[ChangedField]

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def kind(self) -> ChangeKind:
        return ChangeKind.UPDATE


@dataclass(frozen=True, slots=True)
class Removal:
    """A repository label that is not declared in configuration.

    Removals are advisory unless `executable` is set, which only happens for
    repositories configured as strict.
    """

    label: ObservedLabel
    executable: bool = False

    @property
    def name(self) -> str:
        return self.label.name

    @property
    def kind(self) -> ChangeKind:
        return ChangeKind.REMOVAL


@dataclass(frozen=True, slots=True)
class Unchanged:
    label: ObservedLabel

    @property
    def name(self) -> str:
        return self.label.name

    @property
    def kind(self) -> ChangeKind:
        return ChangeKind.UNCHANGED


LabelChange: TypeAlias = Addition | Update | Removal | Unchanged


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Desired label state for one repository."""

    repository: str
    labels: tuple[LabelSpec, ...] = ()
    strict: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.labels, tuple):
            object.__setattr__(self, "labels", tuple(self.labels))

    def label_names(self) -> list[str]:
        return [spec.name for spec in self.labels]
