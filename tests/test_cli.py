"""Unit tests for main.py -- the sessionkit command line.

Covers:
- Argument parsing for serve and create-user
- create-user registers an account whose password verifies
- create-user reports duplicates and short passwords with exit code 1
"""

from __future__ import annotations

import argparse

import pytest

import main
from auth.accounts import authenticate_user
from auth.store import UserStore
from conftest import TEST_SECRET
from core.config import Settings


@pytest.fixture
def cli_settings(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    settings = Settings(
        _env_file=None,
        secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        database_url=f"sqlite:///{tmp_path / 'cli.db'}",
    )
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    return settings


def test_parse_serve() -> None:
    args = main.build_parser().parse_args(["serve", "--port", "9000", "--reload"])
    assert args.func is main._serve
    assert args.port == 9000
    assert args.host is None
    assert args.reload is True


def test_parse_create_user() -> None:
    args = main.build_parser().parse_args(["create-user", "alice", "alice@example.com"])
    assert args.func is main._create_user
    assert (args.username, args.email) == ("alice", "alice@example.com")


def test_command_required() -> None:
    with pytest.raises(SystemExit):
        main.build_parser().parse_args([])


def test_create_user(cli_settings: Settings, capsys: pytest.CaptureFixture[str]) -> None:
    args = argparse.Namespace(username="alice", email="alice@example.com")
    assert main._create_user(args, password="correct-horse") == 0
    assert "Created user alice" in capsys.readouterr().out

    store = UserStore(cli_settings.database_url)
    try:
        assert authenticate_user(store, "alice", "correct-horse", rounds=4).email == "alice@example.com"
    finally:
        store.close()


def test_create_user_duplicate(cli_settings: Settings, capsys: pytest.CaptureFixture[str]) -> None:
    args = argparse.Namespace(username="bob", email="bob@example.com")
    assert main._create_user(args, password="first-pass") == 0
    assert main._create_user(args, password="second-pass") == 1
    assert "already exists" in capsys.readouterr().err


def test_create_user_short_password(cli_settings: Settings) -> None:
    args = argparse.Namespace(username="carol", email="carol@example.com")
    assert main._create_user(args, password="123") == 1


def test_create_user_password_mismatch(cli_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    answers = iter(["first-pass", "other-pass"])
    monkeypatch.setattr(main.getpass, "getpass", lambda prompt="": next(answers))
    args = argparse.Namespace(username="dave", email="dave@example.com")
    assert main._create_user(args) == 1


def test_create_user_password_over_bcrypt_limit(cli_settings: Settings, capsys: pytest.CaptureFixture[str]) -> None:
    """73 UTF-8 bytes would be truncated by bcrypt, so the CLI refuses it like the API does."""
    args = argparse.Namespace(username="erin", email="erin@example.com")
    assert main._create_user(args, password="é" * 36 + "x") == 1
    assert "password" in capsys.readouterr().err

    store = UserStore(cli_settings.database_url)
    try:
        assert store.find_by_username("erin") is None
    finally:
        store.close()


@pytest.mark.parametrize(
    "username,email",
    [("ab", "ab@example.com"), ("frank", "not-an-email")],
)
def test_create_user_rejects_bad_identity(cli_settings: Settings, username: str, email: str) -> None:
    args = argparse.Namespace(username=username, email=email)
    assert main._create_user(args, password="s3cret-pw") == 1


def test_create_user_keeps_password_whitespace(cli_settings: Settings) -> None:
    args = argparse.Namespace(username=" grace ", email="grace@example.com")
    assert main._create_user(args, password=" padded-pw ") == 0

    store = UserStore(cli_settings.database_url)
    try:
        assert authenticate_user(store, "grace", " padded-pw ", rounds=4).username == "grace"
    finally:
        store.close()
