"""
Artifact writer.

Writes rendered artifacts to disk and nothing else.
Tearing down or starting containers is the orchestrator's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from rondb_compose.core.types import RenderedArtifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactWriter:
    """
    Persist RenderedArtifact values.

    output_dir is created on first write.
    """

    output_dir: Path

    def write(self, artifacts: Iterable[RenderedArtifact]) -> List[Path]:
        self.output_dir.mkdir(parents=True, exist_ok=True)

        written: List[Path] = []
        for artifact in artifacts:
            path = Path(artifact.file_path)
            path.write_text(artifact.content, encoding="utf-8")
            logger.info("wrote %s to %s", artifact.kind.value, path)
            written.append(path)

        return written
