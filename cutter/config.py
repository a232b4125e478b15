"""
Configuration - Immutable run configuration and size parsing.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .errors import ConfigError


DEFAULT_CROP_SIZES = ('200x200', '400x400', '800x800', '1920x1080')
DEFAULT_TMP_DIR = '/tmp/cutter'
DEFAULT_REGION = 'eu-central-1'


@dataclass(frozen=True, order=True)
class CropSpec:
    """
    Target output geometry.

    Attributes:
        width: Output width in pixels
        height: Output height in pixels
    """
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


def parse_crop_size(value: str) -> CropSpec:
    """
    Parse a WIDTHxHEIGHT string.

    Raises:
        ConfigError: If the string is malformed or a dimension is not positive
    """
    parts = value.strip().lower().split('x')
    if len(parts) != 2:
        raise ConfigError(
            f"Invalid size '{value}'. Use the expected format: WIDTHxHEIGHT, e.g.: 1920x1080"
        )

    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise ConfigError(
            f"Invalid size '{value}'. Width and height must be integers"
        ) from None

    if width <= 0 or height <= 0:
        raise ConfigError(f"Invalid size '{value}'. Width and height must be positive")

    return CropSpec(width, height)


def parse_crop_sizes(values: Optional[Sequence[str]]) -> Tuple[CropSpec, ...]:
    """Parse a list of size strings, falling back to DEFAULT_CROP_SIZES."""
    return tuple(parse_crop_size(v) for v in (values or DEFAULT_CROP_SIZES))


@dataclass(frozen=True)
class RemoteConfig:
    """
    Remote object store settings.

    Attributes:
        bucket: Bucket name
        region: Bucket region
        prefix: Key prefix to fetch from and publish to
        fetch_remote: Download sources from the bucket before transforming
        endpoint: Optional endpoint URL for S3-compatible stores
    """
    bucket: str
    region: str = DEFAULT_REGION
    prefix: str = ''
    fetch_remote: bool = False
    endpoint: Optional[str] = None


@dataclass(frozen=True)
class CutterConfig:
    """
    Resolved configuration for one run. Built once, never mutated.

    Attributes:
        files_path: Directory holding source images
        output_dir: Directory derived images are written to
        crop_sizes: Target geometries, in iteration order
        overwrite: Also fetch remote keys that look like derivatives
        clean: Remove the working directory before fetching
        verbose: Report every progress update
        tmp_dir: Working directory for remote fetches
        workers: Thread pool size (None uses the executor default)
        remote: Optional remote settings
    """
    files_path: str
    output_dir: str
    crop_sizes: Tuple[CropSpec, ...] = field(
        default_factory=lambda: parse_crop_sizes(None)
    )
    overwrite: bool = False
    clean: bool = True
    verbose: bool = False
    tmp_dir: str = DEFAULT_TMP_DIR
    workers: Optional[int] = None
    remote: Optional[RemoteConfig] = None

    @property
    def fetch_remote(self) -> bool:
        return self.remote is not None and self.remote.fetch_remote

    @property
    def publish_remote(self) -> bool:
        return self.remote is not None and bool(self.remote.bucket)

    def describe(self) -> List[str]:
        """Human-readable description of what this run will do."""
        lines = []
        if self.publish_remote:
            lines.append(f"Will publish files to S3 bucket '{self.remote.bucket}' after completion")
            lines.append(f"Will overwrite files on remote: {self.overwrite}")
        if self.fetch_remote:
            lines.append(f"Fetching files from remote: {self.remote.bucket}/{self.remote.prefix}")
        else:
            lines.append(f"Path to source files locally on this host: {self.files_path}")
        lines.append(f"Output directory: {self.output_dir}")
        lines.append(f"Working/temporary directory: {self.tmp_dir}")
        if self.clean and self.fetch_remote:
            lines.append("Will clean working directory before starting")
        lines.append(f"Will crop to the following {len(self.crop_sizes)} size(s):")
        for spec in self.crop_sizes:
            lines.append(f"\t{spec}")
        return lines


def remote_files_path(tmp_dir: str, prefix: str) -> str:
    """Local directory that fetched sources are materialized into."""
    first_segment = prefix.strip('/').split('/')[0] if prefix else ''
    return os.path.join(tmp_dir, first_segment) if first_segment else tmp_dir


def build_config(
    path: Optional[str] = None,
    sizes: Optional[Sequence[str]] = None,
    output_dir: Optional[str] = None,
    bucket: Optional[str] = None,
    prefix: Optional[str] = None,
    region: Optional[str] = None,
    endpoint: Optional[str] = None,
    fetch_remote: bool = False,
    overwrite: bool = False,
    clean: bool = True,
    verbose: bool = False,
    tmp_dir: Optional[str] = None,
    workers: Optional[int] = None,
) -> CutterConfig:
    """
    Validate raw settings and build a CutterConfig.

    Raises:
        ConfigError: On malformed sizes or conflicting/missing options
    """
    crop_sizes = parse_crop_sizes(sizes)
    tmp_dir = tmp_dir or DEFAULT_TMP_DIR
    prefix = (prefix or '').strip('/')

    if fetch_remote and not bucket:
        raise ConfigError("--fetch-remote requires --s3-bucket")
    if fetch_remote and path:
        raise ConfigError("--path cannot be combined with --fetch-remote")
    if not fetch_remote and not path:
        raise ConfigError("Missing required arguments to run: give --path or --fetch-remote")
    if prefix and not bucket:
        raise ConfigError("--s3-prefix requires --s3-bucket")
    if workers is not None and workers < 1:
        raise ConfigError(f"Invalid worker count: {workers}")

    remote = None
    if bucket:
        remote = RemoteConfig(
            bucket=bucket,
            region=region or DEFAULT_REGION,
            prefix=prefix,
            fetch_remote=fetch_remote,
            endpoint=endpoint,
        )

    files_path = remote_files_path(tmp_dir, prefix) if fetch_remote else path

    return CutterConfig(
        files_path=files_path,
        output_dir=output_dir or files_path,
        crop_sizes=crop_sizes,
        overwrite=overwrite,
        clean=clean,
        verbose=verbose,
        tmp_dir=tmp_dir,
        workers=workers,
        remote=remote,
    )
