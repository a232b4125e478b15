"""
ConcurrentTransformEngine - Transforms every (source, size) pair in parallel.
"""

import enum
import itertools
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .config import CropSpec
from .errors import TransformError
from .image_transformer import ImageTransformer
from .path_namer import derive_path
from .progress import ProgressReporter
from .transfer_stats import TransferStats


class UnitState(enum.Enum):
    """
    Terminal state of a work unit.

    A unit is pending until a worker picks it up and running while its
    worker holds it. Neither is recorded: the only observable states are the
    two terminal ones, and a unit never leaves them (no retry).
    """
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@dataclass(frozen=True)
class WorkUnit:
    """One (source, size) pair and its precomputed output path."""
    source: str
    spec: CropSpec
    output_path: str

    def describe(self) -> str:
        return f"{os.path.basename(self.source)} @ {self.spec}"


@dataclass(frozen=True)
class Outcome:
    """Result of a single work unit."""
    unit: WorkUnit
    state: UnitState
    error: Optional[str] = None
    nbytes: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state is UnitState.SUCCEEDED


class ConcurrentTransformEngine:
    """
    Fans the cross product of sources and crop sizes out to a thread pool.

    A failing unit is logged and dropped; it never affects its siblings.
    Results are only assembled once every unit has finished.
    """

    def __init__(
        self,
        transformer: Optional[ImageTransformer] = None,
        max_workers: Optional[int] = None,
        progress: Optional[ProgressReporter] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize engine.

        Args:
            transformer: Image transformer instance
            max_workers: Thread pool size (None uses the executor default)
            progress: Optional progress reporter
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.transformer = transformer or ImageTransformer(logger=self.logger)
        self.max_workers = max_workers
        self.progress = progress or ProgressReporter(logger=self.logger)
        self.stats = TransferStats()

    def plan(
        self,
        sources: Sequence[str],
        specs: Sequence[CropSpec],
        output_dir: str
    ) -> List[WorkUnit]:
        """Build the work set, source-major."""
        return [
            WorkUnit(
                source=source,
                spec=spec,
                output_path=derive_path(
                    source, spec.width, spec.height, output_dir, self.transformer.EXTENSION
                ),
            )
            for source, spec in itertools.product(sources, specs)
        ]

    def run(
        self,
        sources: Sequence[str],
        specs: Sequence[CropSpec],
        output_dir: str
    ) -> List[str]:
        """
        Transform every source at every size.

        Args:
            sources: Source image paths
            specs: Target geometries
            output_dir: Existing directory for derived images

        Returns:
            Output paths of successful units, in work-set order

        Raises:
            NotADirectoryError: If output_dir does not exist
        """
        if not os.path.isdir(output_dir):
            raise NotADirectoryError(f"Output directory does not exist: {output_dir}")

        units = self.plan(sources, specs, output_dir)
        total = len(units)
        self.stats = TransferStats(total=total)

        self.logger.info(
            f"Processing {len(sources)} files at {len(specs)} size(s) ({total} units)"
        )
        self.progress.report(0, total, "Processed")

        outcomes: List[Outcome] = []
        if units:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(self._process_unit, unit) for unit in units]

                completed = 0
                for future in as_completed(futures):
                    outcome = future.result()
                    completed += 1
                    if outcome.succeeded:
                        self.stats.record_success(outcome.nbytes)
                    else:
                        self.stats.record_failure(f"{outcome.unit.describe()}: {outcome.error}")
                    self.progress.report(completed, total, "Processed")

                outcomes = [f.result() for f in futures]

        self.stats.finish()
        self.logger.info(
            f"Transform complete: {self.stats.succeeded} created, "
            f"{self.stats.failed} failed ({self.stats.elapsed_seconds:.1f}s)"
        )

        return [o.unit.output_path for o in outcomes if o.succeeded]

    def _process_unit(self, unit: WorkUnit) -> Outcome:
        """Decode, transform, encode and write one unit."""
        self.logger.debug(f"Transforming: {unit.describe()}")
        try:
            image = self.transformer.transform(unit.source, unit.spec)
            nbytes = self.transformer.save(image, unit.output_path, unit.source)
        except (TransformError, OSError) as e:
            self.logger.error(f"Failed to transform {unit.source} to {unit.spec}: {e}")
            return Outcome(unit=unit, state=UnitState.FAILED, error=str(e))
        except Exception as e:
            self.logger.error(
                f"Unexpected error transforming {unit.source} to {unit.spec}: "
                f"{type(e).__name__}: {e}"
            )
            return Outcome(unit=unit, state=UnitState.FAILED, error=f"{type(e).__name__}: {e}")

        self.logger.debug(f"Created: {unit.output_path} ({nbytes} bytes)")
        return Outcome(unit=unit, state=UnitState.SUCCEEDED, nbytes=nbytes)
