"""Tests for avd.utils and avd.exceptions modules."""

from __future__ import annotations

import pytest

from avd.exceptions import ConfigError, ResourceInvalid, ResourceNotFound, ResourceUnavailable
from avd.utils import (
    ensure_directory,
    get_env,
    get_env_bool,
    log,
    parse_int_env,
    parse_properties,
    parse_size_to_mb,
    read_properties,
    write_properties,
)


class TestLog:
    def test_info_level(self, capsys):
        log("INFO", "test message")
        captured = capsys.readouterr()
        assert "[INFO]" in captured.out
        assert "test message" in captured.out

    def test_debug_suppressed_by_default(self, capsys):
        log("DEBUG", "should not appear")
        captured = capsys.readouterr()
        assert captured.out == ""


class TestGetEnv:
    def test_returns_value(self, monkeypatch):
        monkeypatch.setenv("TEST_VAR", "hello")
        assert get_env("TEST_VAR") == "hello"

    def test_returns_default(self, monkeypatch):
        monkeypatch.delenv("TEST_VAR", raising=False)
        assert get_env("TEST_VAR", "fallback") == "fallback"


class TestGetEnvBool:
    @pytest.mark.parametrize("value", ["1", "true", "yes", "on", "TRUE"])
    def test_truthy_values(self, monkeypatch, value):
        monkeypatch.setenv("TEST_BOOL", value)
        assert get_env_bool("TEST_BOOL") is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "random"])
    def test_falsy_values(self, monkeypatch, value):
        monkeypatch.setenv("TEST_BOOL", value)
        assert get_env_bool("TEST_BOOL") is False

    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("TEST_BOOL", raising=False)
        assert get_env_bool("TEST_BOOL", True) is True


class TestParseIntEnv:
    def test_valid_value(self, monkeypatch):
        monkeypatch.setenv("MY_INT", "42")
        assert parse_int_env("MY_INT", "10") == 42

    def test_default_value(self, monkeypatch):
        monkeypatch.delenv("MY_INT", raising=False)
        assert parse_int_env("MY_INT", "10") == 10

    def test_non_integer_raises(self, monkeypatch):
        monkeypatch.setenv("MY_INT", "abc")
        with pytest.raises(ConfigError, match="must be an integer"):
            parse_int_env("MY_INT", "10")

    def test_below_min_raises(self, monkeypatch):
        monkeypatch.setenv("MY_INT", "0")
        with pytest.raises(ConfigError, match="must be >= 1"):
            parse_int_env("MY_INT", "10")

    def test_above_max_raises(self, monkeypatch):
        monkeypatch.setenv("MY_INT", "100")
        with pytest.raises(ConfigError, match="must be <= 50"):
            parse_int_env("MY_INT", "10", max_val=50)


class TestProperties:
    def test_parse_skips_comments_and_blanks(self):
        text = "# comment\n\nkey = value\nother=a=b\nnoequals\n"
        assert parse_properties(text) == {"key": "value", "other": "a=b"}

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "config.ini"
        write_properties(path, {"b": "2", "a": "1"})
        assert path.read_text() == "a=1\nb=2\n"
        assert read_properties(path) == {"a": "1", "b": "2"}

    def test_write_leaves_no_temp_files(self, tmp_path):
        write_properties(tmp_path / "x.ini", {"k": "v"})
        assert [p.name for p in tmp_path.iterdir()] == ["x.ini"]

    def test_ensure_directory(self, tmp_path):
        target = tmp_path / "a" / "b"
        ensure_directory(target)
        ensure_directory(target)
        assert target.is_dir()


class TestParseSizeToMb:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1536", 1536),
            ("1536M", 1536),
            ("2G", 2048),
            ("512 MB", 512),
            ("2048K", 2),
            ("1T", 1048576),
            ("3GiB", 3072),
            ("4096B", 0),
            ("2147483648B", 2048),
        ],
    )
    def test_valid(self, raw, expected):
        assert parse_size_to_mb(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "big", "12X", "-5M"])
    def test_invalid(self, raw):
        assert parse_size_to_mb(raw) is None


class TestExceptions:
    def test_not_found_names_kind_and_identifier(self):
        exc = ResourceNotFound("image", "missing-image")
        assert exc.kind == "image"
        assert exc.identifier == "missing-image"
        assert str(exc) == "Resource not found: image 'missing-image'"

    def test_unavailable_includes_reason(self):
        exc = ResourceUnavailable("runtime", "/sdk", "emulator package is not installed")
        assert str(exc) == "Resource unavailable: runtime '/sdk': emulator package is not installed"

    def test_invalid_is_runtime_error(self):
        assert isinstance(ResourceInvalid("image", "x"), RuntimeError)

    def test_config_error_message(self):
        assert str(ConfigError("AVD_MAX_RAM_MB", "must be >= 1 (got 0)")) == "AVD_MAX_RAM_MB must be >= 1 (got 0)"
