import pytest

from env_guard.params import REGISTRY, ParamRegistry, ParamSpec, build_registry


@pytest.fixture(autouse=True)
def clean_environ(monkeypatch):
    # Go variables of the machine running the tests must not leak into the override layer.
    for name in REGISTRY.all_names():
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("ENV_GUARD_LOCK_TIMEOUT", raising=False)
    yield


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def small_registry():
    reg = ParamRegistry()
    reg.register(ParamSpec("GREETING", "hello", description="Free text"))
    reg.register(ParamSpec("MODE", "fast", "enum", choices=("fast", "slow")))
    reg.register(ParamSpec("VERBOSE", "0", "bool"))
    reg.register(ParamSpec("HOME_DIR", "", "path"))
    reg.register(ParamSpec("MANAGED", "", computed=True))
    return reg


@pytest.fixture
def env_file(tmp_path):
    return tmp_path / "go" / "env"
