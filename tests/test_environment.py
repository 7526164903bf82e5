import anyio
import dagger
import pytest

from helm_chart_pipeline import environment
from helm_chart_pipeline.errors import ExecutionEnvironmentError, ToolError


class EngineUnavailable(dagger.DaggerError):
    def __init__(self, message: str):
        Exception.__init__(self, message)


class FakeConnection:
    instances: list['FakeConnection'] = []

    def __init__(self, config):
        self.config = config
        self.entered = False
        self.exited = False
        FakeConnection.instances.append(self)

    async def __aenter__(self):
        self.entered = True
        return 'client'

    async def __aexit__(self, *exc_info):
        self.exited = True
        return False


class RefusingConnection(FakeConnection):
    async def __aenter__(self):
        raise EngineUnavailable('failed to start engine session')


@pytest.fixture(autouse=True)
def reset_connections():
    FakeConnection.instances = []


@pytest.mark.anyio
async def test_connect_yields_client_and_releases_it(monkeypatch):
    monkeypatch.setattr(environment.dagger, 'Connection', FakeConnection)

    async with environment.connect(log_output=None) as client:
        assert client == 'client'

    [connection] = FakeConnection.instances
    assert connection.exited
    assert connection.config.log_output is None


@pytest.mark.anyio
async def test_connect_releases_on_error(monkeypatch):
    monkeypatch.setattr(environment.dagger, 'Connection', FakeConnection)

    with pytest.raises(ToolError):
        async with environment.connect(log_output=None):
            raise ToolError('helm', 1, 'Error: boom')

    assert FakeConnection.instances[0].exited


@pytest.mark.anyio
async def test_connect_releases_on_cancellation(monkeypatch):
    monkeypatch.setattr(environment.dagger, 'Connection', FakeConnection)

    with anyio.CancelScope() as scope:
        async with environment.connect(log_output=None):
            scope.cancel()
            await anyio.sleep(1)

    assert scope.cancelled_caught
    assert FakeConnection.instances[0].exited


@pytest.mark.anyio
async def test_connect_failure_is_fatal(monkeypatch):
    monkeypatch.setattr(environment.dagger, 'Connection', RefusingConnection)

    with pytest.raises(ExecutionEnvironmentError, match='failed to start engine session'):
        async with environment.connect(log_output=None):
            pytest.fail('session should not be usable')

    assert not FakeConnection.instances[0].exited
