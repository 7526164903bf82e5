import contextlib
from collections.abc import Iterator

import dagger


class PipelineError(Exception):
    '''Base class for every error a pipeline stage can raise'''


class ValidationError(PipelineError):
    '''Invalid input, detected before any container is started'''


class ExecutionEnvironmentError(PipelineError):
    '''The Dagger engine could not be reached'''


class ArtifactError(PipelineError):
    '''Mounting, reading or exporting a file failed'''


class ChartReferenceError(PipelineError):
    '''Packaging output does not have the `<name>:<path>` shape'''


class ToolError(PipelineError):
    '''A containerized tool exited with a non-zero status'''

    def __init__(self, tool: str, exit_code: int | None, stderr: str):
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(stderr.strip() or f'{tool} exited with status {exit_code}')


@contextlib.contextmanager
def engine_errors(tool: str) -> Iterator[None]:
    '''Converts errors raised by the Dagger engine into pipeline errors'''
    try:
        yield
    except dagger.ExecError as e:
        raise ToolError(
            tool,
            getattr(e, 'exit_code', None),
            getattr(e, 'stderr', '') or str(e),
        ) from e
    except dagger.QueryError as e:
        raise ArtifactError(str(e)) from e
