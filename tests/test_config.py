"""Tests for pixel_parity.core.config: .env discovery, parsing and Settings."""

import os
from pathlib import Path

import pytest

from pixel_parity.core.config import Settings, _find_dotenv, _parse_dotenv, load_settings, read_environment
from pixel_parity.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give each test its own copy of the environment, minus our keys."""
    environ = {k: v for k, v in os.environ.items() if not k.startswith('PIXEL_PARITY_')}
    monkeypatch.setattr(os, 'environ', environ)


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A fake repository root as the cwd, so the walk-up never leaves tmp_path."""
    (tmp_path / '.git').mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestParseDotenv:
    def test_plain_and_quoted_values(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('PIXEL_PARITY_LOG_LEVEL="debug"\nPIXEL_PARITY_MAX_DETAILS=\'12\'\nPIXEL_PARITY_ALLOWED_DELTA=2\n')
        assert _parse_dotenv(f) == {
            'PIXEL_PARITY_LOG_LEVEL': 'debug',
            'PIXEL_PARITY_MAX_DETAILS': '12',
            'PIXEL_PARITY_ALLOWED_DELTA': '2',
        }

    def test_export_prefix(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('export PIXEL_PARITY_MAX_DETAILS=40\n')
        assert _parse_dotenv(f) == {'PIXEL_PARITY_MAX_DETAILS': '40'}

    def test_other_keys_comments_and_junk_ignored(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('# comment\n\nOPENAI_API_KEY=sk-123\nNOEQUALS\nPIXEL_PARITY_ALLOWED_DELTA=1\n')
        assert _parse_dotenv(f) == {'PIXEL_PARITY_ALLOWED_DELTA': '1'}

    def test_mismatched_quotes_kept(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('PIXEL_PARITY_LOG_LEVEL="info\n')
        assert _parse_dotenv(f) == {'PIXEL_PARITY_LOG_LEVEL': '"info'}


class TestFindDotenv:
    def test_finds_in_parent(self, tmp_path: Path) -> None:
        subdir = tmp_path / 'sub'
        subdir.mkdir()
        dotenv = tmp_path / '.env'
        dotenv.write_text('X=1\n')
        assert _find_dotenv(subdir) == dotenv

    def test_stops_at_git_dir(self, tmp_path: Path) -> None:
        parent = tmp_path / 'repo'
        parent.mkdir()
        (tmp_path / '.env').write_text('X=1\n')
        (parent / '.git').mkdir()
        subdir = parent / 'src'
        subdir.mkdir()
        assert _find_dotenv(subdir) is None

    def test_stops_at_git_file(self, tmp_path: Path) -> None:
        # .git as a file (worktree)
        parent = tmp_path / 'repo'
        parent.mkdir()
        (tmp_path / '.env').write_text('X=1\n')
        (parent / '.git').write_text('gitdir: ../somewhere\n')
        assert _find_dotenv(parent) is None

    def test_env_beside_git_is_found(self, tmp_path: Path) -> None:
        (tmp_path / '.git').mkdir()
        (tmp_path / '.env').write_text('X=1\n')
        assert _find_dotenv(tmp_path) == tmp_path / '.env'


class TestReadEnvironment:
    def test_reads_dotenv_without_touching_environ(self, repo: Path) -> None:
        (repo / '.env').write_text('PIXEL_PARITY_MAX_DETAILS=12\n')
        values, path = read_environment()
        assert values == {'PIXEL_PARITY_MAX_DETAILS': '12'}
        assert path == repo / '.env'
        assert 'PIXEL_PARITY_MAX_DETAILS' not in os.environ

    def test_environ_wins(self, repo: Path) -> None:
        os.environ['PIXEL_PARITY_MAX_DETAILS'] = '5'
        (repo / '.env').write_text('PIXEL_PARITY_MAX_DETAILS=12\n')
        values, _ = read_environment()
        assert values['PIXEL_PARITY_MAX_DETAILS'] == '5'

    def test_explicit_env_file(self, tmp_path: Path) -> None:
        custom = tmp_path / 'custom.env'
        custom.write_text('PIXEL_PARITY_LOG_LEVEL=debug\n')
        values, path = read_environment(str(custom))
        assert path == custom
        assert values['PIXEL_PARITY_LOG_LEVEL'] == 'debug'

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            read_environment(str(tmp_path / 'nope.env'))

    def test_no_file(self, repo: Path) -> None:
        assert read_environment() == ({}, None)


class TestLoadSettings:
    def test_defaults(self, repo: Path) -> None:
        assert load_settings() == Settings()

    def test_from_environment(self, repo: Path) -> None:
        os.environ['PIXEL_PARITY_LOG_LEVEL'] = 'debug'
        os.environ['PIXEL_PARITY_ALLOWED_DELTA'] = '0'
        os.environ['PIXEL_PARITY_MAX_DETAILS'] = '16'
        settings = load_settings()
        assert settings.log_level == 'DEBUG'
        assert settings.allowed_int_delta == 0
        assert settings.max_details == 16

    def test_from_dotenv(self, repo: Path) -> None:
        (repo / '.env').write_text('PIXEL_PARITY_ALLOWED_DELTA=1\n')
        settings = load_settings()
        assert settings.allowed_int_delta == 1
        assert settings.env_path == repo / '.env'

    def test_non_integer_delta(self, repo: Path) -> None:
        os.environ['PIXEL_PARITY_ALLOWED_DELTA'] = 'three'
        with pytest.raises(ConfigurationError) as exc:
            load_settings()
        assert exc.value.setting_name == 'PIXEL_PARITY_ALLOWED_DELTA'

    def test_negative_max_details(self, repo: Path) -> None:
        os.environ['PIXEL_PARITY_MAX_DETAILS'] = '-1'
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_unknown_log_level(self, repo: Path) -> None:
        os.environ['PIXEL_PARITY_LOG_LEVEL'] = 'LOUD'
        with pytest.raises(ConfigurationError):
            load_settings()
