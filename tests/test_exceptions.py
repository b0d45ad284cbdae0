"""Tests for custom exceptions."""

from downgrade_build.exceptions import CommandFailedError, ManifestError, MinimumVersionError


class TestMinimumVersionError:
    """Test MinimumVersionError exception."""

    def test_with_dependency_name(self):
        error = MinimumVersionError("latest", name="left-pad")

        assert error.version_range == "latest"
        assert error.name == "left-pad"
        assert str(error) == "No semver minimum for 'latest' (dependency 'left-pad')"

    def test_without_dependency_name(self):
        error = MinimumVersionError("latest")

        assert error.name is None
        assert str(error) == "No semver minimum for 'latest'"

    def test_is_value_error(self):
        assert isinstance(MinimumVersionError("x"), ValueError)


class TestCommandFailedError:
    """Test CommandFailedError exception."""

    def test_exit_status(self):
        error = CommandFailedError(["npm", "install"], 2)

        assert error.returncode == 2
        assert error.exit_code == 2
        assert error.signal is None
        assert str(error) == "npm install exited with status code 2"

    def test_signal(self):
        error = CommandFailedError(("npm", "run", "test"), -9)

        assert error.args_list == ["npm", "run", "test"]
        assert error.exit_code is None
        assert error.signal == 9
        assert str(error) == "npm run test was terminated by signal 9"


def test_manifest_error():
    error = ManifestError("package.json must contain a JSON object")
    assert isinstance(error, ValueError)
    assert str(error) == "package.json must contain a JSON object"
