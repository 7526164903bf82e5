from dataclasses import dataclass
from pathlib import PurePosixPath

from .errors import ChartReferenceError


@dataclass(frozen=True)
class ChartReference:
    '''
    Packaged chart as reported by `helm package`.

    `helm package` prints a single `<message>: <archive path>` line, so the
    text before the separator becomes `name` and the text after it is the
    path pushed to the registry. `Helm.package` replaces `name` with the
    chart name from Chart.yaml.
    '''
    name: str
    path: str

    @property
    def archive_name(self) -> str:
        return PurePosixPath(self.path).name

    @classmethod
    def parse(cls, output: str) -> 'ChartReference':
        parts = output.split(':')
        if len(parts) != 2:
            raise ChartReferenceError(
                f'expected exactly one ":" in chart reference, got {len(parts) - 1}: {output.strip()!r}'
            )
        name, path = (part.strip() for part in parts)
        if not path:
            raise ChartReferenceError(f'chart reference has no path: {output.strip()!r}')
        return cls(name=name, path=path)

    def __str__(self) -> str:
        return f'{self.name}:{self.path}'
