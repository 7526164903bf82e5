import enum
import logging

from .chart import ChartReference
from .errors import PipelineError, ValidationError
from .helm import Helm

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    IDLE = 'idle'
    PACKAGING = 'packaging'
    TESTING = 'testing'
    PUBLISHING = 'publishing'
    DONE = 'done'
    FAILED = 'failed'


PLANS: dict[str, tuple[Stage, ...]] = {
    'package': (Stage.PACKAGING,),
    'test': (Stage.TESTING,),
    'publish': (Stage.PACKAGING, Stage.PUBLISHING),
    'all': (Stage.PACKAGING, Stage.TESTING, Stage.PUBLISHING),
}


class Pipeline:
    '''
    Runs the stages a command asks for, in order, and stops at the first failure.

    The chart reference produced by packaging is the only value handed from
    one stage to the next.
    '''

    def __init__(self, helm: Helm):
        self.helm = helm
        self.state = Stage.IDLE
        self.failed_stage: Stage | None = None
        self.chart: ChartReference | None = None

    async def run(self, verb: str, version_tag: str) -> str:
        '''Runs the plan of `verb` for `version_tag` and returns the last stage output'''
        plan = PLANS.get(verb)
        if plan is None:
            self.state = Stage.FAILED
            raise ValidationError(f'invalid command specified: {verb!r}, expected one of {", ".join(PLANS)}')
        if not version_tag:
            self.state = Stage.FAILED
            raise ValidationError('invalid number of arguments: expected chart tag')

        output = ''
        for stage in plan:
            self.state = stage
            logger.info('%s %s', stage.value, version_tag)
            try:
                output = await self._run_stage(stage, version_tag)
            except PipelineError:
                self.failed_stage = stage
                self.state = Stage.FAILED
                raise
        self.state = Stage.DONE
        return output

    async def _run_stage(self, stage: Stage, version_tag: str) -> str:
        if stage is Stage.PACKAGING:
            self.chart = await self.helm.package(version_tag)
            return str(self.chart)
        if stage is Stage.TESTING:
            await self.helm.test(version_tag)
            return ''
        if self.chart is None:
            raise ValidationError('nothing to publish: chart was not packaged')
        return await self.helm.publish(self.chart)
