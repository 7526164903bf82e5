import pytest

from fakes import FakeEngine, PACKAGE_OUTPUT
from helm_chart_pipeline.config import PipelineConfig, RegistryConfig


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def engine():
    engine = FakeEngine()
    engine.host_files['chart/Chart.yaml'] = 'apiVersion: v2\nname: conference-app\nversion: 0.1.0\n'
    engine.outputs['package'] = PACKAGE_OUTPUT.format(tag='v1.0.0')
    engine.outputs['push'] = 'Pushed: registry.example.com/ci-bot/conference-app:v1.0.0\n'
    return engine


@pytest.fixture
def config():
    return PipelineConfig(
        registry=RegistryConfig(host='registry.example.com', username='ci-bot', password='s3cret'),
        chart_path='chart',
    )
