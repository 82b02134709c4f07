from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from voicebot.processor.models import IncomingMessage, Outcome


@dataclass(slots=True)
class PipelineContext:
    message: IncomingMessage
    outcome: Outcome
    download_path: Path | None = None
    ogg_path: Path | None = None
    artifacts: list[Path] = field(default_factory=list)


class PipelineStep(ABC):
    stage: str

    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
