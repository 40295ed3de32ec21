from typing import Iterable, Protocol

from .models import LogLine


class CodeRunner(Protocol):
    """Execution surface: runs one file and yields a finite stream of log lines"""

    def run(self, content: str, language: str, filename: str) -> Iterable[LogLine]:
        ...
