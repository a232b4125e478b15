"""
cutter - Batch image cropping with optional S3 fetch and publish.

Three sequential phases:
    1. Fetch (optional): download source images from an S3 prefix
    2. Transform: crop every source to every configured size, in parallel
    3. Publish (optional): upload the generated crops back to S3

Derived images are named <name>_<W>x<H>px_<W>w.jpg, so re-running over a
directory never treats earlier output as new sources.
"""

__version__ = "0.4.0"

from .errors import CutterError, ConfigError, RemoteError, TransformError, DecodeFailed, EncodeFailed
from .config import CropSpec, RemoteConfig, CutterConfig, parse_crop_size, build_config
from .path_namer import DerivativePolicy, derive_path, is_derivative
from .file_set import FileSetResolver
from .image_transformer import ImageTransformer
from .progress import ProgressReporter
from .transfer_stats import TransferStats
from .engine import ConcurrentTransformEngine, WorkUnit, Outcome, UnitState
from .s3_config import S3Config
from .s3_client import S3Client
from .reconciler import RemoteReconciler
from .pipeline import Pipeline, PipelineResult, prepare_directory

__all__ = [
    "CutterError",
    "ConfigError",
    "RemoteError",
    "TransformError",
    "DecodeFailed",
    "EncodeFailed",
    "CropSpec",
    "RemoteConfig",
    "CutterConfig",
    "parse_crop_size",
    "build_config",
    "DerivativePolicy",
    "derive_path",
    "is_derivative",
    "FileSetResolver",
    "ImageTransformer",
    "ProgressReporter",
    "TransferStats",
    "ConcurrentTransformEngine",
    "WorkUnit",
    "Outcome",
    "UnitState",
    "S3Config",
    "S3Client",
    "RemoteReconciler",
    "Pipeline",
    "PipelineResult",
    "prepare_directory",
]
