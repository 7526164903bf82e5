import contextlib
import logging
import sys
from collections.abc import AsyncIterator, Callable
from typing import AsyncContextManager, TextIO

import dagger

from .errors import ExecutionEnvironmentError

logger = logging.getLogger(__name__)

EnvironmentFactory = Callable[[], AsyncContextManager[dagger.Client]]


@contextlib.asynccontextmanager
async def connect(log_output: TextIO | None = sys.stderr) -> AsyncIterator[dagger.Client]:
    '''
    Opens a dedicated Dagger session and closes it when the block exits,
    whether it exits normally, with an error or by cancellation.
    '''
    async with contextlib.AsyncExitStack() as stack:
        try:
            client = await stack.enter_async_context(
                dagger.Connection(dagger.Config(log_output=log_output))
            )
        except dagger.DaggerError as e:
            raise ExecutionEnvironmentError(f'failed to connect to the dagger engine: {e}') from e
        logger.debug('dagger session opened')
        try:
            yield client
        finally:
            logger.debug('releasing dagger session')
