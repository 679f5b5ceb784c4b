# Test configuration
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

from toolgate.config import Settings  # noqa: E402

SERVER_KEY = "sk-or-server-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for an isolated service: no .env, temp dist dir, tight limits."""
    return Settings(
        _env_file=None,
        OPENROUTER_API_KEY=SERVER_KEY,
        OPENROUTER_BASE_URL="https://llm.test/api/v1",
        JAMAICA_API_BASE_URL="https://market.test",
        DIST_DIR=str(tmp_path / "dist"),
        REQUEST_BODY_LIMIT_BYTES=1024,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        PUBLIC_ORIGIN="http://testserver",
    )
