import json

import pytest
from typer.testing import CliRunner

from env_guard.cli import app
from env_guard.exceptions import ErrorKind
from env_guard.locks import FileLock


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, env_file):
    def _invoke(*args, env=None):
        return runner.invoke(app, ["--file", str(env_file), *args], env=env)

    return _invoke


@pytest.fixture
def seeded(env_file):
    env_file.parent.mkdir(parents=True)
    env_file.write_text("# team defaults\nGOOS=linux\n")
    return env_file


def test_no_args_prints_sorted_snapshot(invoke, seeded):
    result = invoke()
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    keys = [line.split("=", 1)[0] for line in lines]
    assert keys == sorted(keys)
    assert "GOOS='linux'" in lines
    assert f"GOENV='{seeded}'" in lines


def test_snapshot_json(invoke, seeded):
    result = invoke("--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["GOOS"] == "linux"
    assert list(data) == sorted(data)


def test_single_key(invoke, seeded):
    result = invoke("GOOS")
    assert result.exit_code == 0
    assert result.output == "linux\n"


def test_override_from_environment(invoke, seeded):
    result = invoke("GOOS", env={"GOOS": "darwin"})
    assert result.output == "darwin\n"


def test_multiple_keys_and_json(invoke, seeded):
    assert invoke("GOOS", "GOSUMDB").output == "linux\nsum.golang.org\n"
    assert json.loads(invoke("--json", "GOOS").output) == {"GOOS": "linux"}


def test_unknown_key_exit_code(invoke, seeded):
    result = invoke("GOFOO")
    assert result.exit_code == ErrorKind.UNKNOWN_KEY.exit_code
    assert "env-guard:" in result.output
    assert "GOFOO" in result.output


def test_write_appends_after_comments(invoke, seeded):
    result = invoke("-w", "GOARCH=arm64", "GOFLAGS=-mod=mod -x")
    assert result.exit_code == 0, result.output
    assert seeded.read_text() == '# team defaults\nGOOS=linux\nGOARCH=arm64\nGOFLAGS="-mod=mod -x"\n'


def test_invalid_write_changes_nothing(invoke, seeded):
    before = seeded.read_bytes()
    result = invoke("-w", "GOARCH=arm64", "GOARCH=potato")
    assert result.exit_code == ErrorKind.INVALID_VALUE.exit_code
    assert "GOARCH" in result.output
    assert seeded.read_bytes() == before


def test_write_computed_key_rejected(invoke, seeded):
    result = invoke("-w", "GOMOD=/src/go.mod")
    assert result.exit_code == ErrorKind.INVALID_VALUE.exit_code


def test_write_unknown_key_needs_passthrough(invoke, seeded):
    assert invoke("-w", "OTHER_TOOL=1").exit_code == ErrorKind.UNKNOWN_KEY.exit_code
    assert invoke("--passthrough", "-w", "OTHER_TOOL=1").exit_code == 0
    assert seeded.read_text().endswith("OTHER_TOOL=1\n")


def test_write_warns_when_environment_shadows(invoke, seeded):
    result = invoke("-w", "GOOS=windows", env={"GOOS": "darwin"})
    assert result.exit_code == 0
    assert "warning: GOOS" in result.output
    assert "GOOS=windows" in seeded.read_text()


def test_unset(invoke, seeded):
    result = invoke("-u", "GOOS", "GOBIN")
    assert result.exit_code == 0, result.output
    assert seeded.read_text() == "# team defaults\n"
    assert invoke("-u", "GOOS").exit_code == 0


def test_parse_error_exit_code(invoke, env_file):
    env_file.parent.mkdir(parents=True)
    env_file.write_text("GOOS=linux\nbroken line\n")
    result = invoke("GOOS")
    assert result.exit_code == ErrorKind.PARSE_ERROR.exit_code
    assert ":2:" in result.output


def test_io_error_exit_code(runner, tmp_path):
    result = runner.invoke(app, ["--file", str(tmp_path), "GOOS"])
    assert result.exit_code == ErrorKind.IO_ERROR.exit_code


def test_locked_exit_code(invoke, seeded):
    with FileLock(seeded):
        result = invoke("--lock-timeout", "0", "-w", "GOOS=darwin")
    assert result.exit_code == ErrorKind.LOCKED.exit_code
    assert seeded.read_text() == "# team defaults\nGOOS=linux\n"


def test_lock_timeout_from_environment(invoke, seeded):
    with FileLock(seeded):
        result = invoke("-w", "GOOS=darwin", env={"ENV_GUARD_LOCK_TIMEOUT": "0"})
    assert result.exit_code == ErrorKind.LOCKED.exit_code


@pytest.mark.parametrize(
    "args",
    [("-w", "-u", "GOOS"), ("-w",), ("-u",), ("-w", "--json", "GOOS=linux")],
)
def test_usage_errors(invoke, seeded, args):
    result = invoke(*args)
    assert result.exit_code == 2
