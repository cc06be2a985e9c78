from env_guard.exceptions import (
    ConfigDuplicateError,
    ConfigError,
    ConfigIOError,
    ConfigLockedError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    ErrorKind,
)


def test_config_validation_error_message_and_attrs():
    err = ConfigValidationError({"GOOS": "bad"}, key="GOOS", value="plan10")
    assert "GOOS: bad" in str(err)
    assert err.errors == {"GOOS": "bad"}
    assert err.key == "GOOS"
    assert err.value == "plan10"
    assert err.kind is ErrorKind.INVALID_VALUE


def test_parse_error_names_path_and_line():
    err = ConfigParseError("/tmp/env", 3, "GOOS linux\n", "missing '='")
    assert str(err).startswith("/tmp/env:3: missing '='")
    assert err.line_no == 3
    assert err.kind is ErrorKind.PARSE_ERROR


def test_error_kinds_have_distinct_exit_codes():
    codes = [kind.exit_code for kind in ErrorKind]
    assert len(set(codes)) == len(codes)
    assert all(code not in (0, 1, 2) for code in codes)


def test_each_error_carries_its_kind():
    assert ConfigNotFoundError("GOFOO").kind is ErrorKind.UNKNOWN_KEY
    assert ConfigIOError("/x", "denied").kind is ErrorKind.IO_ERROR
    assert ConfigLockedError("/x", 1.5).kind is ErrorKind.LOCKED
    assert "1.5s" in str(ConfigLockedError("/x", 1.5))


def test_custom_exceptions_are_subclasses():
    for exc in (
        ConfigValidationError,
        ConfigNotFoundError,
        ConfigDuplicateError,
        ConfigParseError,
        ConfigIOError,
        ConfigLockedError,
    ):
        assert issubclass(exc, ConfigError)
