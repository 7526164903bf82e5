'''Command line entry point: `helm-chart-pipeline <package|test|publish|all> <tag>`'''

import logging

import anyio
import typer

from .config import PipelineConfig
from .errors import PipelineError
from .helm import Helm
from .pipeline import Pipeline

logger = logging.getLogger(__name__)

app = typer.Typer(
    help='Package, test and publish a helm chart with Dagger',
    no_args_is_help=True,
    add_completion=False,
)

TagArgument = typer.Argument(..., help='Chart version tag, e.g. v1.0.0')


def build_pipeline(config: PipelineConfig) -> Pipeline:
    return Pipeline(Helm(config))


@app.callback()
def configure(
    ctx: typer.Context,
    chart_path: str = typer.Option(
        PipelineConfig.chart_path, '--chart-path', help='Helm chart source directory'
    ),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Enable debug logging'),
) -> None:
    '''Reads the registry settings from CONTAINER_REGISTRY* environment variables'''
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    ctx.obj = PipelineConfig.from_env(chart_path=chart_path)


def run(ctx: typer.Context, verb: str, tag: str) -> None:
    pipeline = build_pipeline(ctx.obj)
    try:
        output = anyio.run(pipeline.run, verb, tag)
    except PipelineError as e:
        stage = pipeline.failed_stage
        label = stage.value.capitalize() if stage else 'Invalid command'
        logger.debug('%s failed', verb, exc_info=True)
        typer.echo(f'{label} error: {e}', err=True)
        raise typer.Exit(code=1)
    if output:
        typer.echo(output.strip())


@app.command()
def package(ctx: typer.Context, tag: str = TagArgument) -> None:
    '''Stamp TAG into the chart values and package the chart'''
    run(ctx, 'package', tag)


@app.command()
def test(ctx: typer.Context, tag: str = TagArgument) -> None:
    '''Run chart tests for TAG'''
    run(ctx, 'test', tag)


@app.command()
def publish(ctx: typer.Context, tag: str = TagArgument) -> None:
    '''Package the chart and push it to the registry'''
    run(ctx, 'publish', tag)


@app.command('all')
def all_(ctx: typer.Context, tag: str = TagArgument) -> None:
    '''Package, test and publish, stopping at the first failing stage'''
    run(ctx, 'all', tag)


def main() -> None:
    app()


if __name__ == '__main__':
    main()
