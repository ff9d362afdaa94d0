"""Tests for the environment drift detection script."""

from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import os
from pathlib import Path

import pytest

from scripts import check_env

MANAGED_ENV_KEYS = [
    "INTRA_CLIENT_ID",
    "INTRA_CLIENT_SECRET",
    "INTRA_REDIRECT_URI",
    "ADMIN_LOGINS",
    "PARTICIPANTS_ACCESS",
]


@pytest.fixture(autouse=True)
def _restore_environ():
    """The script loads env files straight into os.environ."""
    saved = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(saved)


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


def _clear_managed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in MANAGED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize("command", ["record", "verify", "check"])
def test_main_requires_existing_env_file(tmp_path: Path, command: str) -> None:
    env_file = tmp_path / ".missing-env"
    hash_file = tmp_path / ".env.sha256"

    argv = [command, "--env-file", str(env_file)]
    if command != "check":
        argv.extend(["--hash-file", str(hash_file)])

    assert check_env.main(argv) == check_env.EXIT_RUNTIME_ERROR


def test_record_then_verify_detects_edits(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    hash_file = tmp_path / ".env.sha256"

    _clear_managed_env(monkeypatch)
    _write_env(
        env_file,
        INTRA_CLIENT_ID="uid",
        INTRA_CLIENT_SECRET="secret",
        ADMIN_LOGINS="alice,bob",
    )

    record_argv = ["record", "--env-file", str(env_file), "--hash-file", str(hash_file)]
    verify_argv = ["verify", "--env-file", str(env_file), "--hash-file", str(hash_file)]

    assert check_env.main(record_argv) == check_env.EXIT_OK
    assert hash_file.read_text(encoding="utf-8").strip()

    _clear_managed_env(monkeypatch)
    assert check_env.main(verify_argv) == check_env.EXIT_OK

    _write_env(
        env_file,
        INTRA_CLIENT_ID="uid",
        INTRA_CLIENT_SECRET="rotated",
        ADMIN_LOGINS="alice,bob",
    )
    _clear_managed_env(monkeypatch)
    assert check_env.main(verify_argv) == check_env.EXIT_CHECKSUM_ERROR


def test_verify_without_baseline_is_a_runtime_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    _clear_managed_env(monkeypatch)
    _write_env(env_file, INTRA_CLIENT_ID="uid", INTRA_CLIENT_SECRET="secret")

    exit_code = check_env.main(
        ["verify", "--env-file", str(env_file), "--hash-file", str(tmp_path / "none")]
    )

    assert exit_code == check_env.EXIT_RUNTIME_ERROR


def test_missing_secret_fails_validation(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    _clear_managed_env(monkeypatch)
    _write_env(env_file, INTRA_CLIENT_ID="uid")

    assert check_env.main(["check", "--env-file", str(env_file)]) == check_env.EXIT_VALIDATION_ERROR


def test_invalid_participants_policy_fails_validation(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    _clear_managed_env(monkeypatch)
    _write_env(
        env_file,
        INTRA_CLIENT_ID="uid",
        INTRA_CLIENT_SECRET="secret",
        PARTICIPANTS_ACCESS="everyone",
    )

    assert check_env.main(["check", "--env-file", str(env_file)]) == check_env.EXIT_VALIDATION_ERROR
