import json
import logging
from pathlib import PurePosixPath
from typing import Annotated

import dagger
from dagger import Doc

from .config import ImageConfig
from .environment import EnvironmentFactory, connect
from .errors import ValidationError, engine_errors

logger = logging.getLogger(__name__)


def is_any_empty(*values: str | None) -> bool:
    return any(not value for value in values)


def version_expression(field: str, value: str) -> str:
    '''Builds a yq expression that sets a single scalar field to a string'''
    return f'{field} = {json.dumps(value)}'


class Yq:
    '''
    Edits YAML files of the host in place with mikefarah/yq
    '''
    workdir = '/tmp/yq'

    def __init__(
        self,
        image: Annotated[ImageConfig, Doc('yq image')],
        environment: Annotated[EnvironmentFactory, Doc('Dagger session factory')] = connect,
    ):
        self.image = image
        self.environment = environment

    def container(self, client: dagger.Client) -> dagger.Container:
        '''Creates container with configured yq'''
        return (
            client.container().from_(address=self.image.address)
            .with_user(self.image.user)
            .with_workdir(self.workdir)
            .with_entrypoint(['yq'])
        )

    async def patch(
        self,
        expression: Annotated[str, Doc('yq expression applied to the file')],
        file: Annotated[str, Doc('Host path of the YAML file')],
    ) -> str:
        '''Runs an in-place yq edit and writes the result back to the host file'''
        if is_any_empty(expression, file):
            raise ValidationError('expression and file are required to update YAML')

        target = f'{self.workdir}/{PurePosixPath(file).name}'
        logger.info('patching %s with %r', file, expression)
        async with self.environment() as client:
            with engine_errors('yq'):
                return await (
                    self.container(client)
                    .with_file(target, client.host().file(file))
                    .with_exec(['-i', expression, target], use_entrypoint=True)
                    .file(target)
                    .export(file)
                )
