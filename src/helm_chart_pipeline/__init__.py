'''This package provides a Dagger-driven pipeline for a single Helm chart.

It stamps a version into the chart values, packages the chart, runs chart tests
and publishes the packaged archive to an OCI registry. Every tool runs inside
a throwaway container, so the host only needs a Dagger engine.
'''

from .chart import ChartReference as ChartReference   # noqa F401
from .config import PipelineConfig as PipelineConfig   # noqa F401
from .errors import PipelineError as PipelineError   # noqa F401
from .helm import Helm as Helm   # noqa F401
from .pipeline import Pipeline as Pipeline   # noqa F401
from .yq import Yq as Yq   # noqa F401
