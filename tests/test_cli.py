"""Tests for the bundle-utils command line."""

import json

import pytest
from click.testing import CliRunner

from bundle_utils.main import cli
from bundle_utils.settings import SettingsManager

REGISTRY = """\
- Bundle-SymbolicName: host.bundle
  Bundle-Version: 3.2.1
- Bundle-SymbolicName: frag.bundle
  Fragment-Host: host.bundle
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def registry_file(tmp_path):
    path = tmp_path / "bundles.yaml"
    path.write_text(REGISTRY)
    return str(path)


def test_no_command_prints_help(runner):
    result = runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_packages_from_env_and_explicit(runner):
    result = runner.invoke(
        cli,
        ["packages", "-p", "sun.misc"],
        env={"ORG_OSGI_FRAMEWORK_SYSTEM_PACKAGES": "javax.*,,org.w3c.dom", "BUNDLE_UTILS_SYSTEM_PACKAGES": "com.acme"},
    )
    assert result.exit_code == 0
    assert result.output.splitlines() == ["javax.*", "org.w3c.dom", "com.acme", "sun.misc"]


def test_packages_from_project_settings(runner, tmp_path):
    # conftest chdirs into tmp_path, so the default project settings live here
    SettingsManager().set_property("bundle_utils.system.packages", "from.settings.*")

    result = runner.invoke(cli, ["packages"])
    assert result.output.splitlines() == ["from.settings.*"]


def test_packages_include_imported(runner):
    result = runner.invoke(cli, ["packages", "--include-imported"])
    assert result.exit_code == 0
    assert "bundle_utils" in result.output.splitlines()


@pytest.mark.parametrize(
    "package,exit_code,output",
    [
        ("com.foo.bar", 0, "match"),
        ("com.foobar", 0, "match"),
        ("org.other", 1, "no match"),
    ],
)
def test_match_with_patterns(runner, package, exit_code, output):
    result = runner.invoke(cli, ["match", package, "-p", "com.foo.*"])
    assert result.exit_code == exit_code
    assert result.output.strip() == output


def test_match_uses_settings(runner):
    result = runner.invoke(cli, ["match", "javax.xml"], env={"ORG_OSGI_FRAMEWORK_SYSTEM_PACKAGES": "javax.*"})
    assert result.exit_code == 0
    assert result.output.strip() == "match"


def test_package_name(runner):
    assert runner.invoke(cli, ["package-name", "com.foo.Bar"]).output == "com.foo\n"
    assert runner.invoke(cli, ["package-name", ".Bar"]).output == "\n"


def test_check(runner):
    ok = runner.invoke(cli, ["check", "-p", "java.*", "-p", "java.lang"])
    assert ok.exit_code == 0
    assert "2 patterns OK" in ok.output

    bad = runner.invoke(cli, ["check", "-p", "com.*.impl"])
    assert bad.exit_code == 1
    assert "com.*.impl" in bad.output


def test_find_follows_host(runner, registry_file):
    result = runner.invoke(cli, ["find", registry_file, "frag.bundle"])
    assert result.exit_code == 0
    assert "host.bundle" in result.output
    assert "3.2.1" in result.output


def test_find_fragment_itself(runner, registry_file):
    result = runner.invoke(cli, ["find", registry_file, "frag.bundle", "--no-follow-host"])
    assert result.exit_code == 0
    assert "frag.bundle" in result.output
    assert "yes" in result.output


def test_find_missing(runner, registry_file):
    result = runner.invoke(cli, ["find", registry_file, "missing"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_find_invalid_registry(runner, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("not: a list\n")
    result = runner.invoke(cli, ["find", str(path), "x"])
    assert result.exit_code == 1
    assert "must contain a list" in result.output


def test_log_file_option(runner, tmp_path):
    log_path = tmp_path / "logs" / "cli.jsonl"
    result = runner.invoke(cli, ["--log-file", str(log_path), "--log-level", "DEBUG", "packages", "-p", "a.b"])
    assert result.exit_code == 0

    entries = [json.loads(line) for line in log_path.read_text().splitlines()]
    messages = [e["message"] for e in entries if e["logger"] == "bundle_utils.packages"]
    assert "Ignored packages=a.b" in messages


def test_log_file_records_fragment_event(runner, tmp_path, registry_file):
    log_path = tmp_path / "find.jsonl"
    result = runner.invoke(
        cli, ["--log-file", str(log_path), "--log-level", "DEBUG", "find", registry_file, "frag.bundle"]
    )
    assert result.exit_code == 0

    entries = [json.loads(line) for line in log_path.read_text().splitlines()]
    [event] = [e for e in entries if e["event"] == "bundle:fragment_host"]
    assert event["bundle"] == "frag.bundle"
    assert event["host"] == "host.bundle"


class TestConfigCommands:
    KEY = "org.osgi.framework.system.packages"

    def test_set_get_unset(self, runner, tmp_path):
        assert runner.invoke(cli, ["config", "set", self.KEY, "javax.*"]).exit_code == 0
        assert (tmp_path / ".bundle-utils" / "settings.yaml").exists()
        assert runner.invoke(cli, ["config", "get", self.KEY]).output == "javax.*\n"
        assert runner.invoke(cli, ["match", "javax.xml"]).exit_code == 0

        result = runner.invoke(cli, ["config", "unset", self.KEY])
        assert result.exit_code == 0
        assert runner.invoke(cli, ["config", "get", self.KEY]).output == "\n"

    def test_scopes(self, runner, tmp_path):
        runner.invoke(cli, ["config", "set", self.KEY, "user.*", "--global"])
        runner.invoke(cli, ["config", "set", self.KEY, "local.*", "--local"])

        assert (tmp_path / "home" / ".bundle-utils" / "settings.yaml").exists()
        assert runner.invoke(cli, ["config", "get", self.KEY]).output == "local.*\n"

        assert runner.invoke(cli, ["config", "unset", self.KEY, "--local"]).exit_code == 0
        assert runner.invoke(cli, ["config", "get", self.KEY]).output == "user.*\n"

    def test_unset_missing(self, runner):
        result = runner.invoke(cli, ["config", "unset", self.KEY])
        assert result.exit_code == 1
        assert "not set" in result.output
