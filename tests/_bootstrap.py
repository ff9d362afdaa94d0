"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


_DEFAULT_ENV_VARS: dict[str, str] = {
    "INTRA_CLIENT_ID": "test-client-id",
    "INTRA_CLIENT_SECRET": "test-client-secret",
    "INTRA_REDIRECT_URI": "http://localhost:3000/api/auth/callback",
    "INTRA_PAGE_DELAY_SECONDS": "0",
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
