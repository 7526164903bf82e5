from helm_chart_pipeline.config import PipelineConfig, RegistryConfig, get_env


def test_get_env_falls_back_when_unset():
    assert get_env('CONTAINER_REGISTRY', 'docker.io', {}) == 'docker.io'
    assert get_env('CONTAINER_REGISTRY', 'docker.io', {'CONTAINER_REGISTRY': ''}) == ''


def test_registry_defaults():
    registry = RegistryConfig.from_env({})
    assert registry.host == 'docker.io'
    assert registry.username == 'salaboy'
    assert registry.password == ''
    assert registry.oci_url == 'oci://docker.io/salaboy'


def test_registry_from_environment():
    registry = RegistryConfig.from_env({
        'CONTAINER_REGISTRY': 'ghcr.io',
        'CONTAINER_REGISTRY_USER': 'ci-bot',
        'CONTAINER_REGISTRY_PASSWORD': 's3cret',
    })
    assert registry.oci_url == 'oci://ghcr.io/ci-bot'
    assert registry.password == 's3cret'
    assert 's3cret' not in repr(registry)


def test_pipeline_config_overrides():
    config = PipelineConfig.from_env({}, chart_path='charts/app/')
    assert config.registry == RegistryConfig()
    assert config.values_path == 'charts/app/values.yaml'
    assert config.helm_image.address == 'docker.io/alpine/helm:3.12.1'
    assert config.yq_image.address == 'docker.io/mikefarah/yq:4'
    assert config.yq_image.user == 'root'
