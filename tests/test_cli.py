"""Tests for the readprops command line interface."""

import io
import json
from pathlib import Path

import pytest

from readprops.cli import build_parser, load_settings, main, write_properties
from readprops.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("QUIET", "SKIP", "ACTIVE_PROFILES", "MAX_EXPANSIONS", "PROBE_ENVIRONMENT",
                 "ENV_FILE", "LOG_LEVEL", "LOG_FILE", "LOG_JSON"):
        monkeypatch.delenv(f"READPROPS_{name}", raising=False)


def run(argv):
    out = io.StringIO()
    code = main(argv, out=out)
    return code, out.getvalue()


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test unset flags stay None so environment settings apply."""
        args = build_parser().parse_args(["a.properties"])
        assert args.files == ["a.properties"]
        assert args.quiet is None
        assert args.skip is None
        assert args.profiles is None
        assert args.defines == []
        assert not hasattr(args, "max_expansions")
        assert args.format == "properties"

    def test_repeatable_options(self):
        """Test -P and -D accumulate."""
        args = build_parser().parse_args(["-P", "dev", "-P", "prod", "-D", "a=1", "-D", "b=2"])
        assert args.profiles == ["dev", "prod"]
        assert args.defines == ["a=1", "b=2"]

    def test_max_expansions_zero_is_unbounded(self):
        """Test --max-expansions 0 maps to None."""
        assert build_parser().parse_args(["--max-expansions", "0"]).max_expansions is None

    def test_invalid_max_expansions(self):
        """Test a non-integer bound is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--max-expansions", "many"])
        assert exc_info.value.code == 2


class TestWriteProperties:
    """Tests for output formatting."""

    def test_properties_format_sorted(self):
        """Test key=value lines sorted by key."""
        out = io.StringIO()
        write_properties({"b": "2", "a": "1"}, "properties", out)
        assert out.getvalue() == "a=1\nb=2\n"

    def test_json_format(self):
        """Test JSON output."""
        out = io.StringIO()
        write_properties({"b": "2", "a": "1"}, "json", out)
        assert json.loads(out.getvalue()) == {"a": "1", "b": "2"}


class TestMain:
    """Tests for the main entry point."""

    def test_resolves_files(self, tmp_path: Path):
        """Test files are read, merged and resolved."""
        a = tmp_path / "a.properties"
        a.write_text("url=http://${host}:${port}\nport=80\n")
        b = tmp_path / "b.properties"
        b.write_text("host=example.org\nport=8080\n")

        code, output = run([str(a), str(b)])

        assert code == 0
        assert output == "host=example.org\nport=8080\nurl=http://example.org:8080\n"

    def test_system_properties(self, tmp_path: Path):
        """Test -D values are used as fallback."""
        f = tmp_path / "a.properties"
        f.write_text("dir=${user.home}/app\n")

        code, output = run([str(f), "-D", "user.home=/home/ci", "--format", "json"])

        assert code == 0
        assert json.loads(output) == {"dir": "/home/ci/app"}

    def test_env_placeholder(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test ${env.NAME} reads the OS environment."""
        monkeypatch.setenv("READPROPS_CLI_HOME", "/srv")
        f = tmp_path / "a.properties"
        f.write_text("home=${env.READPROPS_CLI_HOME}\n")

        code, output = run([str(f), "--no-probe"])

        assert code == 0
        assert output == "home=/srv\n"

    def test_env_file(self, tmp_path: Path):
        """Test --env-file supplies ${env.NAME} values."""
        env_file = tmp_path / "app.env"
        env_file.write_text("READPROPS_CLI_ONLY_IN_FILE=from-file\n")
        f = tmp_path / "a.properties"
        f.write_text("v=${env.READPROPS_CLI_ONLY_IN_FILE}\n")

        code, output = run([str(f), "--env-file", str(env_file)])

        assert code == 0
        assert output == "v=from-file\n"

    def test_missing_file_fails(self, tmp_path: Path, capsys):
        """Test a missing file exits with status 1."""
        code, output = run([str(tmp_path / "missing.properties")])

        assert code == 1
        assert output == ""
        assert "PROPERTY_FILE_NOT_FOUND" in capsys.readouterr().err

    def test_missing_file_quiet(self, tmp_path: Path):
        """Test --quiet ignores missing files."""
        code, output = run([str(tmp_path / "missing.properties"), "--quiet"])
        assert code == 0
        assert output == ""

    def test_quiet_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test READPROPS_QUIET is honoured without the flag."""
        monkeypatch.setenv("READPROPS_QUIET", "true")
        code, _ = run([str(tmp_path / "missing.properties")])
        assert code == 0

    def test_skip(self, tmp_path: Path):
        """Test --skip prints nothing."""
        code, output = run([str(tmp_path / "missing.properties"), "--skip"])
        assert code == 0
        assert output == ""

    def test_profile(self, tmp_path: Path):
        """Test -P expands ${project.activeProfile} in paths."""
        (tmp_path / "prod.properties").write_text("env=prod\n")
        pattern = str(tmp_path / "${project.activeProfile}.properties")

        code, output = run([pattern, "-P", "dev", "-P", "prod"])

        assert code == 0
        assert output == "env=prod\n"

    def test_cycle_fails(self, tmp_path: Path, capsys):
        """Test a cyclic definition exits with status 1."""
        f = tmp_path / "a.properties"
        f.write_text("a=${b}\nb=${a}\n")

        code, _ = run([str(f), "--max-expansions", "20"])

        assert code == 1
        assert "CYCLE_DETECTED" in capsys.readouterr().err

    def test_invalid_environment_settings(self, monkeypatch: pytest.MonkeyPatch, capsys):
        """Test invalid READPROPS_* values exit with status 1."""
        monkeypatch.setenv("READPROPS_MAX_EXPANSIONS", "lots")
        code, _ = run([])
        assert code == 1
        assert "INVALID_CONFIGURATION" in capsys.readouterr().err

    def test_missing_env_file_fails(self, tmp_path: Path, capsys):
        """Test a mistyped --env-file is reported instead of silently ignored."""
        f = tmp_path / "a.properties"
        f.write_text("v=${env.READPROPS_CLI_ONLY_IN_FILE}\n")

        code, output = run([str(f), "--env-file", str(tmp_path / "typo.env")])

        assert code == 1
        assert output == ""
        err = capsys.readouterr().err
        assert "INVALID_CONFIGURATION" in err
        assert "typo.env" in err


class TestLoadSettings:
    """Tests for combining environment settings with command line options."""

    def test_options_override_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test flags win over READPROPS_* values."""
        env_file = tmp_path / "app.env"
        env_file.write_text("A=1\n")
        monkeypatch.setenv("READPROPS_MAX_EXPANSIONS", "5")
        args = build_parser().parse_args(["--max-expansions", "7", "--env-file", str(env_file), "-q"])

        settings = load_settings(args)

        assert settings.resolver.max_expansions == 7
        assert settings.resolver.env_file == env_file
        assert settings.loader.quiet is True

    def test_overrides_are_validated(self, tmp_path: Path):
        """Test validation sees the values given on the command line."""
        args = build_parser().parse_args(["--env-file", str(tmp_path / "absent.env")])

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(args)

        assert exc_info.value.details["name"] == "READPROPS_ENV_FILE"
