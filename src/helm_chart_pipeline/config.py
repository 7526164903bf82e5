import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace


def get_env(key: str, fallback: str, environ: Mapping[str, str] | None = None) -> str:
    '''Returns the value of an environment variable, or fallback if it is not set'''
    environ = os.environ if environ is None else environ
    return environ.get(key, fallback)


@dataclass(frozen=True)
class ImageConfig:
    '''Container image used to run a single tool'''
    registry: str
    repository: str
    tag: str
    user: str

    @property
    def address(self) -> str:
        return f'{self.registry}/{self.repository}:{self.tag}'


@dataclass(frozen=True)
class RegistryConfig:
    '''OCI registry the packaged chart is pushed to'''
    host: str = 'docker.io'
    username: str = 'salaboy'
    password: str = field(default='', repr=False)

    @property
    def oci_url(self) -> str:
        return f'oci://{self.host}/{self.username}'

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'RegistryConfig':
        return cls(
            host=get_env('CONTAINER_REGISTRY', cls.host, environ),
            username=get_env('CONTAINER_REGISTRY_USER', cls.username, environ),
            password=get_env('CONTAINER_REGISTRY_PASSWORD', '', environ),
        )


@dataclass(frozen=True)
class PipelineConfig:
    '''
    Process-wide settings, built once at startup and passed to every stage
    '''
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    chart_path: str = './helm/conference-app'
    values_file: str = 'values.yaml'
    version_field: str = '.version'
    helm_image: ImageConfig = ImageConfig(
        registry='docker.io',
        repository='alpine/helm',
        tag='3.12.1',
        user='65532',
    )
    yq_image: ImageConfig = ImageConfig(
        registry='docker.io',
        repository='mikefarah/yq',
        tag='4',
        user='root',   # the mounted file is written in place
    )

    @property
    def values_path(self) -> str:
        return f'{self.chart_path.rstrip("/")}/{self.values_file}'

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> 'PipelineConfig':
        config = cls(registry=RegistryConfig.from_env(environ))
        return replace(config, **overrides) if overrides else config
