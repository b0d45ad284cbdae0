"""Unit tests for npm invocation."""

import subprocess
from unittest.mock import patch

import pytest

from downgrade_build.exceptions import CommandFailedError
from downgrade_build.package_manager import (
    NESTED_ENV_VAR,
    is_nested_invocation,
    run_command,
    run_npm_install,
    run_npm_script,
)


@pytest.fixture
def mock_run():
    with patch("downgrade_build.package_manager.subprocess.run") as run, patch(
        "downgrade_build.package_manager.shutil.which", side_effect=lambda name: f"/usr/bin/{name}"
    ):
        run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
        yield run


@pytest.mark.parametrize(
    "environ,expected",
    [
        ({}, False),
        ({NESTED_ENV_VAR: ""}, False),
        ({NESTED_ENV_VAR: "1"}, True),
        ({"OTHER": "1"}, False),
    ],
)
def test_is_nested_invocation(environ, expected):
    assert is_nested_invocation(environ) is expected


def test_is_nested_invocation_custom_guard():
    assert is_nested_invocation({"MY_GUARD": "yes"}, guard="MY_GUARD")


def test_run_command_success(mock_run, tmp_path):
    run_command(["echo", "hi"], cwd=tmp_path)
    mock_run.assert_called_once_with(["/usr/bin/echo", "hi"], cwd=tmp_path, env=None, check=False)


def test_run_command_failure(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=3)
    with pytest.raises(CommandFailedError) as exc_info:
        run_command(["npm", "test"], cwd=tmp_path)
    assert exc_info.value.exit_code == 3
    assert exc_info.value.args_list == ["npm", "test"]


def test_run_command_failure_names_command_as_given(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=1)
    with pytest.raises(CommandFailedError) as exc_info:
        run_npm_install(tmp_path)
    assert mock_run.call_args[0][0] == ["/usr/bin/npm", "install"]
    assert exc_info.value.args_list == ["npm", "install"]
    assert str(exc_info.value) == "npm install exited with status code 1"


def test_run_command_killed_by_signal(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=-15)
    with pytest.raises(CommandFailedError, match="terminated by signal 15"):
        run_command(["npm", "test"], cwd=tmp_path)


def test_run_npm_install(mock_run, tmp_path):
    run_npm_install(tmp_path)
    args, kwargs = mock_run.call_args
    assert args[0] == ["/usr/bin/npm", "install"]
    assert kwargs["cwd"] == tmp_path
    assert kwargs["env"] is None


def test_run_npm_install_custom_executable(mock_run, tmp_path):
    run_npm_install(tmp_path, npm="pnpm")
    assert mock_run.call_args[0][0] == ["/usr/bin/pnpm", "install"]


def test_run_npm_script_sets_guard(mock_run, tmp_path):
    run_npm_script(tmp_path, ["test", "--", "--watch=false"], environ={"PATH": "/bin"})
    args, kwargs = mock_run.call_args
    assert args[0] == ["/usr/bin/npm", "run", "test", "--", "--watch=false"]
    assert kwargs["env"] == {"PATH": "/bin", NESTED_ENV_VAR: "1"}


def test_run_npm_script_does_not_mutate_environment(mock_run, tmp_path):
    environ = {"PATH": "/bin"}
    run_npm_script(tmp_path, ["build"], environ=environ)
    assert environ == {"PATH": "/bin"}


def test_run_npm_script_inherits_process_environment(mock_run, tmp_path, monkeypatch):
    monkeypatch.setenv("DOWNGRADE_BUILD_TEST_MARKER", "present")
    run_npm_script(tmp_path, ["test"])
    env = mock_run.call_args[1]["env"]
    assert env["DOWNGRADE_BUILD_TEST_MARKER"] == "present"
    assert env[NESTED_ENV_VAR] == "1"


def test_unknown_executable_falls_back_to_bare_name(tmp_path):
    with patch("downgrade_build.package_manager.subprocess.run") as run, patch(
        "downgrade_build.package_manager.shutil.which", return_value=None
    ):
        run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
        run_npm_install(tmp_path, npm="npm-missing")
    assert run.call_args[0][0] == ["npm-missing", "install"]
