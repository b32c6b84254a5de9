"""Shared pytest fixtures for sigdoc tests."""

from pathlib import Path

import pytest
from dotenv import load_dotenv
from hypothesis import settings

from sigdoc.core.config import SigdocConfig

# Load environment variables from .env file
load_dotenv()

# Configure hypothesis for property-based testing
settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("dev", max_examples=20, deadline=None)
settings.load_profile("dev")


@pytest.fixture
def fixtures_path() -> Path:
    """Directory holding the Ruby sample sources."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sig_handler_path(fixtures_path: Path) -> Path:
    return fixtures_path / "sig_handler.rb"


@pytest.fixture
def isolated_config(monkeypatch) -> SigdocConfig:
    """Configuration built from defaults only (no env vars, no .env file)."""
    for key in ("MERGE_POLICY", "FILE_PATTERN", "EXCLUDE_DIRS", "INCLUDE_PRIVATE", "MAX_FILE_BYTES"):
        monkeypatch.delenv(f"SIGDOC_{key}", raising=False)
    return SigdocConfig(_env_file=None)
