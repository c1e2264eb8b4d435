"""
Workspace - centralized data path resolution for Cadence.

A Workspace represents the root directory containing the local template and
transaction database plus optional configuration. All paths are computed
relative to this root.

Resolution priority:
1. Explicit path (--data-dir CLI option)
2. CADENCE_DATA environment variable
3. Current working directory
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Workspace:
    """Root directory for all Cadence data paths."""

    root: Path

    @classmethod
    def resolve(cls, explicit: Path | None = None) -> Workspace:
        """Resolve workspace root from explicit path, env var, or CWD.

        Args:
            explicit: Explicitly provided path (highest priority)

        Returns:
            Workspace with resolved root
        """
        if explicit is not None:
            return cls(root=explicit)
        env = os.environ.get("CADENCE_DATA")
        if env:
            return cls(root=Path(env))
        return cls(root=Path.cwd())

    @property
    def database_path(self) -> Path:
        return self.root / "data" / "cadence.db"

    @property
    def similarity_config(self) -> Path:
        return self.root / "config" / "similarity.yml"


__all__ = ["Workspace"]
