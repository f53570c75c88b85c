import logging

import pytest

import hybridserve.main as main_module
from hybridserve.dispatch import ListenerState
from hybridserve.main import create_runtime


class _FakeServer:
    """Records the sockets uvicorn would have served on and returns at once."""

    instances: list["_FakeServer"] = []

    def __init__(self, config):
        self.config = config
        self.sockets = None
        _FakeServer.instances.append(self)

    async def serve(self, sockets=None):
        self.sockets = sockets


@pytest.fixture(autouse=True)
def _reset_fake_servers():
    _FakeServer.instances.clear()
    yield


async def test_init_failure_exits_before_binding(prod_settings, make_registrar, caplog):
    runtime = create_runtime(prod_settings, register_routes=make_registrar(error=OSError("disk gone")))
    runtime.listener.server_factory = _FakeServer

    with pytest.raises(SystemExit) as excinfo:
        await runtime.listener.serve()

    assert excinfo.value.code == 1
    assert runtime.listener.state is ListenerState.FAILED
    assert runtime.handle.socket is None
    assert _FakeServer.instances == []
    assert any(r.levelno == logging.CRITICAL for r in caplog.records)


async def test_listener_binds_after_successful_init(prod_settings, registrar, caplog):
    caplog.set_level(logging.INFO)
    runtime = create_runtime(prod_settings, register_routes=registrar)
    runtime.listener.server_factory = _FakeServer

    await runtime.listener.serve()

    assert registrar.calls == 1
    assert runtime.listener.state is ListenerState.READY
    assert runtime.handle.bound
    assert runtime.handle.port != 0

    (server,) = _FakeServer.instances
    assert server.sockets == [runtime.handle.socket]
    assert runtime.handle.server is server

    lines = [r.getMessage() for r in caplog.records if r.name == "hybridserve.server"]
    assert lines == [f"Server listening on port {runtime.handle.port}"]


async def test_listener_reuses_settled_initializer(prod_settings, registrar):
    runtime = create_runtime(prod_settings, register_routes=registrar)
    runtime.listener.server_factory = _FakeServer

    await runtime.initializer.wait()
    await runtime.listener.serve()

    assert registrar.calls == 1


def test_main_skips_listener_when_serverless(monkeypatch, prod_settings, registrar):
    prod_settings.VERCEL = "1"
    runtime = create_runtime(prod_settings, register_routes=registrar)
    monkeypatch.setattr(main_module, "get_runtime", lambda: runtime)

    main_module.main()

    assert runtime.listener.state is ListenerState.NOT_STARTED
    assert not runtime.initializer.started
