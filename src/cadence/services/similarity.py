"""
Similarity providers for reconciliation.

The matcher asks a provider whether two categories are "similar" and whether
two descriptions are synonyms. Providers are swappable:

- ExactTable: only case-insensitive equality counts
- FuzzyTable: group lookups (e.g. food ~ groceries ~ dining) plus
  description synonym groups (e.g. salary ~ paycheck)

FuzzyTable groups can be loaded from config/similarity.yml:

    categories:
      food: [groceries, dining, restaurant, fast food]
    descriptions:
      salary: [paycheck, pay, wages]
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Protocol, Sequence

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from cadence.errors import ValidationError

DEFAULT_CATEGORY_GROUPS: Dict[str, List[str]] = {
    "food": ["groceries", "dining", "restaurant", "fast food"],
    "groceries": ["food", "dining", "restaurant"],
    "transportation": ["gas", "fuel", "uber", "lyft", "taxi"],
    "gas": ["transportation", "fuel"],
    "entertainment": ["movies", "shows", "concerts", "games"],
    "shopping": ["clothing", "electronics", "home goods"],
}

DEFAULT_DESCRIPTION_SYNONYMS: Dict[str, List[str]] = {
    "salary": ["paycheck", "pay", "wages"],
    "rent": ["rental", "housing"],
    "utilities": ["electric", "water", "gas bill"],
    "groceries": ["food", "supermarket", "market"],
}


class SimilarityProvider(Protocol):
    def categories_similar(self, first: str, second: str) -> bool: ...

    def descriptions_similar(self, first: str, second: str) -> bool: ...


def _norm(value: str) -> str:
    return (value or "").strip().lower()


def _contained(first: str, second: str) -> bool:
    # Empty descriptions carry no signal
    if not first or not second:
        return False
    return first in second or second in first


class ExactTable:
    """No similarity beyond case-insensitive equality/containment."""

    def categories_similar(self, first: str, second: str) -> bool:
        return _norm(first) == _norm(second)

    def descriptions_similar(self, first: str, second: str) -> bool:
        return _contained(_norm(first), _norm(second))


class SimilarityConfig(BaseModel):
    """Shape of similarity.yml."""

    categories: Dict[str, List[str]] = Field(default_factory=dict)
    descriptions: Dict[str, List[str]] = Field(default_factory=dict)


class FuzzyTable(ExactTable):
    """Group-based category similarity and description synonyms."""

    def __init__(
        self,
        category_groups: Mapping[str, Sequence[str]] | None = None,
        description_synonyms: Mapping[str, Sequence[str]] | None = None,
    ):
        groups = DEFAULT_CATEGORY_GROUPS if category_groups is None else category_groups
        synonyms = (
            DEFAULT_DESCRIPTION_SYNONYMS if description_synonyms is None else description_synonyms
        )
        self.category_groups = {_norm(k): [_norm(v) for v in vs] for k, vs in groups.items()}
        self.description_synonyms = {
            _norm(k): [_norm(v) for v in vs] for k, vs in synonyms.items()
        }

    @classmethod
    def from_config(cls, config: SimilarityConfig) -> FuzzyTable:
        return cls(config.categories or None, config.descriptions or None)

    def categories_similar(self, first: str, second: str) -> bool:
        a, b = _norm(first), _norm(second)
        if a == b:
            return True
        for main, similar in self.category_groups.items():
            if (a == main and b in similar) or (b == main and a in similar):
                return True
        return False

    def descriptions_similar(self, first: str, second: str) -> bool:
        a, b = _norm(first), _norm(second)
        if super().descriptions_similar(a, b):
            return True
        for main, similar in self.description_synonyms.items():
            if main in a and any(s in b for s in similar):
                return True
            if main in b and any(s in a for s in similar):
                return True
        return False


def load_similarity_table(path: Path) -> FuzzyTable:
    """Load a FuzzyTable from YAML; defaults when the file is missing.

    Raises:
        ValidationError: Malformed YAML or groups that are not name -> list mappings
    """
    if not path.exists():
        return FuzzyTable()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        config = SimilarityConfig.model_validate(data)
    except (yaml.YAMLError, PydanticValidationError) as exc:
        raise ValidationError(f"Invalid similarity config {path}: {exc}") from exc
    return FuzzyTable.from_config(config)


def save_similarity_config(path: Path, config: SimilarityConfig) -> None:
    """Write a similarity config as YAML, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            config.model_dump(),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )


def default_similarity_config() -> SimilarityConfig:
    return SimilarityConfig(
        categories={k: list(v) for k, v in DEFAULT_CATEGORY_GROUPS.items()},
        descriptions={k: list(v) for k, v in DEFAULT_DESCRIPTION_SYNONYMS.items()},
    )


__all__ = [
    "DEFAULT_CATEGORY_GROUPS",
    "DEFAULT_DESCRIPTION_SYNONYMS",
    "ExactTable",
    "FuzzyTable",
    "SimilarityConfig",
    "SimilarityProvider",
    "default_similarity_config",
    "load_similarity_table",
    "save_similarity_config",
]
