"""
RemoteReconciler - Fetches source images from and publishes derivatives to S3.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence, Tuple

from .errors import RemoteError
from .image_transformer import ImageTransformer
from .path_namer import DerivativePolicy, DEFAULT_POLICY
from .progress import ProgressReporter
from .s3_client import S3Client
from .transfer_stats import TransferStats


def local_path_for_key(key: str, destination_dir: str) -> str:
    """
    Map an object key to a local path, dropping its first path segment.

    ``gallery/img1.jpg`` becomes ``<destination_dir>/img1.jpg``.
    """
    segments = [s for s in key.split('/') if s]
    if len(segments) > 1:
        segments = segments[1:]
    return os.path.join(destination_dir, *segments)


def remote_key_for(path: str, prefix: str) -> str:
    """
    Build the object key a local file is published under.

    Only the file name is kept: any directory structure under the working
    directory is discarded, so files from different remote prefixes that
    share a name and a bucket publish to the same key.
    """
    name = os.path.basename(path)
    prefix = prefix.strip('/')
    return f"{prefix}/{name}" if prefix else name


class RemoteReconciler:
    """
    Decides which remote objects are genuine sources, downloads them, and
    uploads generated derivatives back.

    Transfers within a phase run on a thread pool; a failing key is logged
    and dropped without stopping the others.
    """

    def __init__(
        self,
        s3_client: S3Client,
        policy: Optional[DerivativePolicy] = None,
        max_workers: Optional[int] = None,
        progress: Optional[ProgressReporter] = None,
        content_type: str = ImageTransformer.CONTENT_TYPE,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reconciler.

        Args:
            s3_client: Object store client
            policy: Derivative detection policy
            max_workers: Thread pool size for transfers
            progress: Optional progress reporter
            content_type: Content type of published objects
            logger: Optional logger instance
        """
        self.s3 = s3_client
        self.policy = policy or DEFAULT_POLICY
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)
        self.progress = progress or ProgressReporter(logger=self.logger)
        self.content_type = content_type
        self.stats = TransferStats()

    def select_keys(
        self,
        keys: Sequence[str],
        prefix: str,
        overwrite: bool = False
    ) -> Tuple[List[str], int]:
        """
        Filter a listing down to the keys that should be downloaded.

        Marked derivatives (our own naming or legacy size tokens) and the
        prefix marker object are always skipped. Unless overwrite is set, any
        key the coarse derivative check matches is skipped as well.

        Returns:
            Tuple of (accepted keys in listing order, skipped count)
        """
        prefix_marker = f"{prefix.strip('/')}/"
        accepted = []
        skipped = 0

        for key in keys:
            if not key or key == prefix_marker or key.endswith('/'):
                skipped += 1
                continue
            if self.policy.is_marked_derivative(key):
                skipped += 1
                continue
            if not overwrite and self.policy.is_derivative(key):
                skipped += 1
                continue
            accepted.append(key)

        return accepted, skipped

    def fetch(
        self,
        bucket: str,
        prefix: str,
        destination_dir: str,
        overwrite: bool = False
    ) -> List[str]:
        """
        Download source images under prefix into destination_dir.

        Args:
            bucket: Bucket name
            prefix: Key prefix to list
            destination_dir: Existing local directory
            overwrite: Also download keys that look like derivatives

        Returns:
            Local paths of downloaded files, in listing order

        Raises:
            RemoteError: If the bucket cannot be listed
        """
        self.logger.info(f"Downloading files from S3 bucket '{bucket}' ({prefix})...")
        keys = self.s3.list_keys(bucket, prefix)
        accepted, skipped = self.select_keys(keys, prefix, overwrite)

        targets = []
        seen = set()
        for key in accepted:
            path = local_path_for_key(key, destination_dir)
            if path in seen:
                self.logger.warning(f"Skipping {key}: maps to already fetched {path}")
                skipped += 1
                continue
            seen.add(path)
            targets.append((key, path))

        self.logger.info(
            f"Downloading {len(targets)} files to {destination_dir} (skipped {skipped})"
        )
        self.stats = TransferStats(total=len(targets), skipped=skipped)
        succeeded = self._run_transfers(
            [(key, self._download, (bucket, key, path)) for key, path in targets],
            "Downloaded"
        )

        self.logger.info(
            f"Fetch complete: {self.stats.succeeded} downloaded, {self.stats.failed} failed"
        )
        return [path for key, path in targets if key in succeeded]

    def publish(self, bucket: str, prefix: str, files: Sequence[str]) -> None:
        """
        Upload files as ``prefix/<basename>``.

        Raises:
            RemoteError: After all uploads were attempted, if any failed
        """
        self.logger.info(f"Uploading {len(files)} files to S3 bucket '{bucket}'")
        self.stats = TransferStats(total=len(files))
        self._run_transfers(
            [(path, self._upload, (bucket, remote_key_for(path, prefix), path)) for path in files],
            "Uploaded"
        )

        self.logger.info(
            f"Publish complete: {self.stats.succeeded} uploaded, {self.stats.failed} failed"
        )
        if self.stats.failed:
            raise RemoteError(
                f"{self.stats.failed} of {self.stats.total} uploads to '{bucket}' failed"
            )

    def _run_transfers(self, jobs, label: str) -> set:
        """
        Run (name, func, args) jobs on a thread pool.

        Returns:
            Names of the jobs that succeeded
        """
        total = len(jobs)
        succeeded = set()
        self.progress.report(0, total, label)
        if not jobs:
            self.stats.finish()
            return succeeded

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(func, *args): name for name, func, args in jobs}
            completed = 0
            for future in as_completed(futures):
                name = futures[future]
                completed += 1
                try:
                    nbytes = future.result()
                except (RemoteError, OSError) as e:
                    self.logger.error(f"{label} failed for {name}: {e}")
                    self.stats.record_failure(f"{name}: {e}")
                else:
                    succeeded.add(name)
                    self.stats.record_success(nbytes)
                self.progress.report(completed, total, label)

        self.stats.finish()
        return succeeded

    def _download(self, bucket: str, key: str, path: str) -> int:
        data = self.s3.download_object(bucket, key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)
        self.logger.debug(f"Downloaded: {key} -> {path}")
        return len(data)

    def _upload(self, bucket: str, key: str, path: str) -> int:
        with open(path, 'rb') as f:
            data = f.read()
        self.s3.upload_object(bucket, key, data, self.content_type)
        self.logger.debug(f"Uploaded: {path} -> {key}")
        return len(data)
