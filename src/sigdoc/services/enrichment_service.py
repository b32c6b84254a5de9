"""Enrichment service for coordinating a documentation run.

This module provides the EnrichmentService, which discovers source files,
runs the source adapter over each one with its own correlator, and merges
the per-file registries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from sigdoc.adapters import RubyAdapter, SourceAdapter
from sigdoc.core.config import MergePolicy, SigdocConfig, get_config
from sigdoc.core.models import Diagnostic, Registry

logger = logging.getLogger(__name__)


@dataclass
class EnrichResult:
    """Result of an enrichment run."""

    source_path: Path
    registry: Registry = field(default_factory=Registry)
    files_scanned: int = 0
    files_skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def objects_count(self) -> int:
        return len(self.registry)

    @property
    def methods_count(self) -> int:
        return len(self.registry.methods())

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self.registry.diagnostics

    @property
    def success(self) -> bool:
        """Check if every file was processed."""
        return len(self.errors) == 0


class EnrichmentService:
    """Service for enriching documentation from sig blocks.

    Each source file is analyzed independently, so a failure or a dangling
    signature in one file never affects another.
    """

    def __init__(
        self,
        config: SigdocConfig | None = None,
        adapter: SourceAdapter | None = None,
    ) -> None:
        """Initialize the enrichment service.

        Args:
            config: Settings to use (the cached global config by default).
            adapter: Source adapter (a RubyAdapter by default).
        """
        self._config = config or get_config()
        self._adapter = adapter or RubyAdapter(self._config)

    @classmethod
    def with_policy(cls, policy: MergePolicy, config: SigdocConfig | None = None) -> EnrichmentService:
        """Build a service whose merge policy overrides the configured one."""
        base = config or get_config()
        return cls(base.model_copy(update={"merge_policy": policy}))

    def enrich_path(self, source_path: Path) -> EnrichResult:
        """Enrich a single file or every matching file below a directory.

        Args:
            source_path: File or directory to scan.

        Returns:
            EnrichResult with the merged registry, counts and any errors.
        """
        result = EnrichResult(source_path=source_path)

        if not source_path.exists():
            result.errors.append(f"Source path does not exist: {source_path}")
            return result

        for path in self.discover_files(source_path):
            if path.stat().st_size > self._config.max_file_bytes:
                logger.info(f"Skipping {path}: larger than {self._config.max_file_bytes} bytes")
                result.files_skipped += 1
                continue
            try:
                registry = self._adapter.analyze_file(path)
            except Exception as e:
                logger.warning(f"Failed to analyze {path}: {e}")
                result.errors.append(f"Error analyzing {path}: {e}")
                continue
            result.registry = result.registry.merge(registry)
            result.files_scanned += 1

        if result.files_scanned == 0 and not result.errors and result.files_skipped == 0:
            result.errors.append("No supported source files found")
        return result

    def enrich_source(self, source: str, file: str | None = None) -> Registry:
        """Enrich one in-memory source unit."""
        return self._adapter.analyze_source(source, file=file)

    def discover_files(self, source_path: Path) -> list[Path]:
        """List the source files to analyze, sorted and without excluded directories.

        Args:
            source_path: File or directory.

        Returns:
            Matching files in a stable order.
        """
        if source_path.is_file():
            return [source_path]
        excluded = set(self._config.exclude_dirs)
        files: list[Path] = []
        for path in sorted(source_path.rglob(self._config.file_pattern)):
            relative = path.relative_to(source_path)
            if excluded.intersection(relative.parts[:-1]):
                continue
            if path.is_file():
                files.append(path)
        return files
