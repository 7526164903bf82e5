import logging
from dataclasses import replace
from typing import Annotated

import yaml
import dagger
from dagger import Doc

from .chart import ChartReference
from .config import PipelineConfig
from .environment import EnvironmentFactory, connect
from .errors import ValidationError, engine_errors
from .yq import Yq, version_expression

logger = logging.getLogger(__name__)


class Helm:
    '''
    Packages, tests and publishes the configured helm chart
    '''

    def __init__(
        self,
        config: Annotated[PipelineConfig, Doc('Pipeline settings')],
        environment: Annotated[EnvironmentFactory, Doc('Dagger session factory')] = connect,
        yq: Annotated[Yq | None, Doc('Patcher used to stamp the chart values')] = None,
    ):
        self.config = config
        self.environment = environment
        self.yq = yq or Yq(config.yq_image, environment=environment)

    @property
    def user(self) -> str:
        return self.config.helm_image.user

    def container(self, client: dagger.Client) -> dagger.Container:
        '''Creates container with configured helm'''
        return (
            client.container().from_(address=self.config.helm_image.address)
            .with_user(self.user)
            .with_exec(['mkdir', '-p', '-m', '770', '/tmp/helm/registry'])
            .with_env_variable(
                'HELM_REGISTRY_CONFIG',
                '/tmp/helm/registry/config.json',
            )
            .with_new_file(
                '$HELM_REGISTRY_CONFIG',
                contents='{}',
                owner=self.user,
                permissions=0o600,
                expand=True,
            )
            .with_entrypoint(['/usr/bin/helm'])
        )

    def with_registry_login(
        self,
        client: dagger.Client,
        container: dagger.Container,
    ) -> dagger.Container:
        '''Logs in to the configured registry, feeding the password through stdin'''
        registry = self.config.registry
        password = client.set_secret('registry-password', registry.password)
        cmd = [
            'sh',
            '-c',
            (
                'printf %s "$REGISTRY_PASSWORD"'
                ' | helm registry login "$REGISTRY_HOST"'
                ' --username "$REGISTRY_USER"'
                ' --password-stdin'
            ),
        ]
        return (
            container.with_env_variable('REGISTRY_HOST', registry.host)
            .with_env_variable('REGISTRY_USER', registry.username)
            .with_secret_variable('REGISTRY_PASSWORD', password)
            .with_exec(cmd, use_entrypoint=False)
        )

    def _chart_name(self, chart_yaml: str) -> str:
        '''Returns the chart name declared in Chart.yaml'''
        chart_file = f'{self.config.chart_path}/Chart.yaml'
        try:
            metadata = yaml.safe_load(chart_yaml) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f'{chart_file} is not valid YAML: {e}') from e
        if not isinstance(metadata, dict):
            raise ValidationError(f'{chart_file} must be a mapping')
        name = str(metadata.get('name') or '').strip()
        if not name:
            raise ValidationError(f'{chart_file} has no chart name')
        return name

    async def package(
        self,
        version_tag: Annotated[str, Doc('Chart version to stamp and package')],
    ) -> ChartReference:
        '''Stamps the version into the chart values and packages the chart'''
        if not version_tag:
            raise ValidationError('invalid number of arguments: expected chart tag')

        async with self.environment() as client:
            await self.yq.patch(
                version_expression(self.config.version_field, version_tag),
                self.config.values_path,
            )

            source = client.host().directory(self.config.chart_path)
            with engine_errors('helm'):
                chart_yaml = await source.file('Chart.yaml').contents()
            chart_name = self._chart_name(chart_yaml)

            container = (
                self.container(client)
                .with_env_variable('HELM_CHART_PATH', '/tmp/chart')
                .with_directory('$HELM_CHART_PATH', source, owner=self.user, expand=True)
                .with_workdir('$HELM_CHART_PATH', expand=True)
                .with_exec(
                    ['package', '.', '--dependency-update', '--version', version_tag],
                    use_entrypoint=True,
                )
            )
            with engine_errors('helm'):
                chart = replace(ChartReference.parse(await container.stdout()), name=chart_name)
                await container.file(chart.path).export(chart.archive_name)

        logger.info('packaged chart %s to %s', chart.name, chart.archive_name)
        return chart

    async def test(
        self,
        version_tag: Annotated[str, Doc('Chart version under test')],
    ) -> None:
        '''Placeholder for chart tests, always succeeds'''
        if not version_tag:
            raise ValidationError('invalid number of arguments: expected chart tag')
        logger.info('no chart tests configured for %s', version_tag)

    async def publish(
        self,
        chart: Annotated[ChartReference | str, Doc('Packaged chart reference')],
    ) -> str:
        '''Pushes a packaged chart to the configured OCI registry'''
        if not isinstance(chart, ChartReference):
            chart = ChartReference.parse(chart)

        destination = self.config.registry.oci_url
        logger.info('pushing %s to %s', chart.archive_name, destination)
        async with self.environment() as client:
            container = (
                self.with_registry_login(client, self.container(client))
                .with_file(chart.path, client.host().file(chart.archive_name), owner=self.user)
                .with_exec(['push', chart.path, destination], use_entrypoint=True)
            )
            with engine_errors('helm'):
                out = await container.stdout()

        logger.info('publish output: %s', out.strip())
        return out
