"""Global configuration for sigdoc.

This module provides centralized configuration management with support for
environment variables and sensible defaults.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class MergePolicy(str, Enum):
    """How signature-derived return types treat explicitly authored types."""

    SIGNATURE = "signature"  # signature types replace explicit @return types
    EXPLICIT = "explicit"  # explicit types survive unless a sig chain re-declares them


class SigdocConfig(BaseSettings):
    """sigdoc configuration settings.

    Values can be overridden via environment variables with SIGDOC_ prefix.
    Example: SIGDOC_MERGE_POLICY=explicit overrides merge_policy.
    """

    # Tag merging
    merge_policy: MergePolicy = Field(
        default=MergePolicy.SIGNATURE,
        description="Precedence between sig return types and explicit @return types",
    )

    # Source discovery
    file_pattern: str = Field(
        default="*.rb",
        description="Glob used to find source files when scanning a directory",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: ["vendor", ".bundle", "node_modules", "tmp"],
        description="Directory names skipped while scanning",
    )
    max_file_bytes: int = Field(
        default=2_000_000,
        ge=1024,
        description="Files larger than this are skipped",
    )

    # Output
    include_private: bool = Field(
        default=True,
        description="Include private members in CLI listings",
    )

    model_config = {
        "env_prefix": "SIGDOC_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_config() -> SigdocConfig:
    """Get cached configuration instance.

    Returns:
        SigdocConfig singleton instance.
    """
    return SigdocConfig()


def reload_config() -> SigdocConfig:
    """Reload configuration (clears cache).

    Returns:
        Fresh SigdocConfig instance.
    """
    get_config.cache_clear()
    return get_config()
