"""Dataset build service.

Drives every configured source, one at a time and in a fixed order, through
reading, extraction and per-line merging, then assembles and writes the
layers. A missing, unreadable or unrecognised source only loses its own
contribution; the dataset is written even when every source is gone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import CENTER_SOURCES, CALL_SOURCES, SKIP_WHEN_SOURCES_MISSING
from ..dataset import assemble_layers, write_dataset
from ..errors import SourceReadError
from ..extractors import EXTRACTORS, SourceExtractor, select_extractor
from ..merge import LineRegistry
from ..models import CenterPoint, Layer
from ..source_reader import Table, read_table, source_exists

CallSource = Tuple[str | Path, Optional[str]]


@dataclass(slots=True)
class DatasetServiceConfig:
    reader: Callable[[str | Path], Table] = read_table
    extractors: Sequence[SourceExtractor] = field(default_factory=lambda: EXTRACTORS)
    logger: logging.Logger | None = None


class DatasetService:
    def __init__(self, config: DatasetServiceConfig | None = None):
        self.config = config or DatasetServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    def _extract(self, path: Path, kind: str, line_id: Optional[str] = None) -> list:
        if not source_exists(path):
            self._log.warning("Source %s not found; skipping", path)
            return []
        try:
            table = self.config.reader(path)
        except SourceReadError as exc:
            self._log.warning("Skipping unreadable source %s: %s", path, exc)
            return []
        extractor = select_extractor(
            table, kind=kind, extractors=self.config.extractors
        )
        if extractor is None:
            self._log.warning(
                "No %s layout recognised in %s; source contributes no points",
                kind,
                path,
            )
            return []
        if extractor.needs_line_id and not line_id:
            self._log.warning(
                "%s requires a line id but none was configured; skipping", path
            )
            return []
        points = extractor.extract(table, line_id)
        self._log.info(
            "%s: extracted %d points with coordinates (%s layout)",
            path.name,
            len(points),
            extractor.name,
        )
        return points

    def collect(
        self,
        call_sources: Sequence[CallSource],
        center_sources: Sequence[str | Path],
    ) -> Tuple[LineRegistry, List[CenterPoint]]:
        registry = LineRegistry()
        for path, line_id in call_sources:
            points = self._extract(Path(path), "lines", line_id)
            if not points:
                continue
            if line_id:
                registry.contribute(line_id, points)
            else:
                registry.contribute_tagged(points)
        centers: List[CenterPoint] = []
        for path in center_sources:
            centers.extend(self._extract(Path(path), "centers"))
        return registry, centers

    def build(
        self,
        call_sources: Sequence[CallSource],
        center_sources: Sequence[str | Path],
    ) -> List[Layer]:
        registry, centers = self.collect(call_sources, center_sources)
        layers = assemble_layers(registry, centers)
        self._log.info(
            "Calls: %d layers, %d points; centers: %d points",
            len(layers) - 1,
            registry.total_points(),
            len(centers),
        )
        return layers

    def run(
        self,
        source_dir: str | Path,
        output_file: str | Path,
        *,
        call_sources: Sequence[CallSource] = CALL_SOURCES,
        center_sources: Sequence[str | Path] = CENTER_SOURCES,
        skip_when_missing: bool = SKIP_WHEN_SOURCES_MISSING,
    ) -> Optional[Path]:
        """Build the dataset from ``source_dir`` and write it to ``output_file``.

        Returns the written path, or ``None`` when no call source exists and
        an earlier dataset is kept (``skip_when_missing``).
        """

        base = Path(source_dir)
        calls = [(base / name, line_id) for name, line_id in call_sources]
        centers = [base / name for name in center_sources]
        out_path = Path(output_file)
        if (
            skip_when_missing
            and out_path.is_file()
            and not any(source_exists(path) for path, _ in calls)
        ):
            self._log.info(
                "Source files not found; keeping existing dataset %s", out_path
            )
            return None
        layers = self.build(calls, centers)
        written = write_dataset(out_path, layers)
        self._log.info("Dataset written to %s", written)
        return written
