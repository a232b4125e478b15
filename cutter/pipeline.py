"""
Pipeline - Runs the fetch, transform and publish phases in order.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from typing import List, Optional

from .config import CutterConfig
from .engine import ConcurrentTransformEngine, WorkUnit
from .file_set import FileSetResolver
from .image_transformer import ImageTransformer
from .path_namer import DerivativePolicy, DEFAULT_POLICY
from .progress import ProgressReporter
from .reconciler import RemoteReconciler
from .s3_client import S3Client
from .transfer_stats import TransferStats


def prepare_directory(path: str, clean: bool = False, logger: Optional[logging.Logger] = None) -> None:
    """Create path, removing it first when clean is set."""
    logger = logger or logging.getLogger(__name__)
    if clean and os.path.exists(path):
        logger.info(f"Removing existing directory {path}...")
        shutil.rmtree(path)
    os.makedirs(path, exist_ok=True)


@dataclass
class PipelineResult:
    """
    Outcome of a pipeline run.

    Attributes:
        sources: Source files that were transformed
        outputs: Derived files that were written
        fetch_stats: Fetch phase statistics (None if not fetched)
        transform_stats: Transform phase statistics
        publish_stats: Publish phase statistics (None if not published)
    """
    sources: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    fetch_stats: Optional[TransferStats] = None
    transform_stats: Optional[TransferStats] = None
    publish_stats: Optional[TransferStats] = None

    @property
    def failed_count(self) -> int:
        return sum(
            s.failed for s in (self.fetch_stats, self.transform_stats, self.publish_stats)
            if s is not None
        )


class Pipeline:
    """
    Runs one batch as described by a CutterConfig.

    Phases are strictly sequential: fetch (optional), resolve, transform,
    publish (optional). OSError and RemoteError end the run; per-unit
    failures are counted in the phase statistics.
    """

    def __init__(
        self,
        config: CutterConfig,
        s3_client: Optional[S3Client] = None,
        policy: Optional[DerivativePolicy] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize pipeline.

        Args:
            config: Run configuration
            s3_client: Object store client, required when config has a remote
            policy: Derivative detection policy
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.policy = policy or DEFAULT_POLICY

        progress = ProgressReporter(verbose=config.verbose, logger=self.logger)
        self.resolver = FileSetResolver(self.policy, logger=self.logger)
        self.engine = ConcurrentTransformEngine(
            transformer=ImageTransformer(logger=self.logger),
            max_workers=config.workers,
            progress=progress,
            logger=self.logger,
        )

        self.reconciler = None
        if config.remote is not None:
            if s3_client is None:
                raise ValueError("An S3 client is required for remote configurations")
            self.reconciler = RemoteReconciler(
                s3_client,
                policy=self.policy,
                max_workers=config.workers,
                progress=progress,
                content_type=self.engine.transformer.CONTENT_TYPE,
                logger=self.logger,
            )

    def plan(self) -> List[WorkUnit]:
        """Resolve local sources and return the work set without running it."""
        sources = self.resolver.resolve(self.config.files_path)
        return self.engine.plan(sources, self.config.crop_sizes, self.config.output_dir)

    def run(self) -> PipelineResult:
        """
        Execute all phases.

        Raises:
            OSError: Directory missing or unreadable
            RemoteError: Remote listing failed or uploads failed
        """
        config = self.config
        result = PipelineResult()

        if config.fetch_remote:
            prepare_directory(config.files_path, clean=config.clean, logger=self.logger)
            self.reconciler.fetch(
                config.remote.bucket,
                config.remote.prefix,
                config.files_path,
                overwrite=config.overwrite,
            )
            result.fetch_stats = self.reconciler.stats

        self.logger.info(f"Finding files in {config.files_path}")
        result.sources = self.resolver.resolve(config.files_path)

        os.makedirs(config.output_dir, exist_ok=True)
        result.outputs = self.engine.run(result.sources, config.crop_sizes, config.output_dir)
        result.transform_stats = self.engine.stats

        if config.publish_remote:
            try:
                self.reconciler.publish(config.remote.bucket, config.remote.prefix, result.outputs)
            finally:
                result.publish_stats = self.reconciler.stats

        self.logger.info("Done!")
        return result
