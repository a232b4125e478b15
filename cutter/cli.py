"""
Command Line Interface for cutter.
"""

import argparse
import logging
import sys
from typing import List, Optional

import urllib3

from .config import DEFAULT_CROP_SIZES, DEFAULT_TMP_DIR, CutterConfig, build_config
from .errors import ConfigError, RemoteError
from .pipeline import Pipeline
from .s3_client import S3Client
from .s3_config import S3Config


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logging.getLogger('cutter')


def get_config(args: argparse.Namespace) -> CutterConfig:
    """Build the run configuration from parsed arguments."""
    env = S3Config.from_env()
    return build_config(
        path=getattr(args, 'path', None),
        sizes=args.size,
        output_dir=args.output_dir,
        bucket=getattr(args, 's3_bucket', None),
        prefix=getattr(args, 's3_prefix', None),
        region=getattr(args, 's3_region', None) or env.region,
        endpoint=getattr(args, 's3_endpoint', None) or env.endpoint,
        fetch_remote=getattr(args, 'fetch_remote', False),
        overwrite=getattr(args, 'overwrite', False),
        clean=not getattr(args, 'no_clean', False),
        verbose=args.verbose,
        tmp_dir=getattr(args, 'tmp_dir', None),
        workers=getattr(args, 'workers', None),
    )


def get_s3_client(config: CutterConfig, logger: logging.Logger) -> S3Client:
    """Create an S3 client for the configured remote."""
    s3_config = S3Config.from_env()
    s3_config.region = config.remote.region
    s3_config.endpoint = config.remote.endpoint

    errors = s3_config.validate()
    if errors:
        raise ConfigError("; ".join(errors))

    if not s3_config.verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    return S3Client(s3_config, logger)


def explain_config(config: CutterConfig, logger: logging.Logger) -> None:
    logger.info("*************** CONFIGURATION ***************")
    for line in config.describe():
        logger.info(line)
    logger.info("*************** END CONFIGURATION ***************")


def cmd_run(args: argparse.Namespace) -> int:
    """Execute run command."""
    logger = setup_logging(args.verbose)

    try:
        config = get_config(args)
        s3_client = get_s3_client(config, logger) if config.remote else None
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if config.verbose:
        explain_config(config, logger)

    try:
        pipeline = Pipeline(config, s3_client=s3_client, logger=logger)
        result = pipeline.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except RemoteError as e:
        logger.error(f"Remote phase failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    if not args.quiet:
        stats = result.transform_stats
        print()
        print(f"Sources: {len(result.sources)}")
        print(f"Created: {len(result.outputs)}")
        print(f"Errors: {result.failed_count}")
        print(f"Time: {stats.elapsed_seconds:.1f}s")

    return 0 if result.failed_count == 0 else 1


def cmd_plan(args: argparse.Namespace) -> int:
    """Execute plan command."""
    logger = setup_logging(args.verbose)

    try:
        config = get_config(args)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    try:
        units = Pipeline(config, logger=logger).plan()
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    for unit in units:
        print(f"{unit.source} -> {unit.output_path}")
    print(f"{len(units)} unit(s) for {len(config.crop_sizes)} size(s)")
    return 0


def add_size_arguments(parser: argparse.ArgumentParser) -> None:
    """Add size and output arguments to a parser."""
    parser.add_argument('-s', '--size', action='append', metavar='WxH',
                        help='Crop size as WIDTHxHEIGHT (e.g. 200x200), repeat per size '
                             f'(default: {" ".join(DEFAULT_CROP_SIZES)})')
    parser.add_argument('--output-dir', metavar='PATH',
                        help='Directory for derived images (default: source directory)')
    parser.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                        help='Enable verbose logging')


def add_remote_arguments(parser: argparse.ArgumentParser) -> None:
    """Add S3 arguments to a parser."""
    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('-b', '--s3-bucket',
                          help='S3 bucket to publish to (and fetch from, with --fetch-remote)')
    s3_group.add_argument('-r', '--fetch-remote', action='store_true',
                          help='Fetch images from the bucket given in --s3-bucket')
    s3_group.add_argument('--s3-prefix', help='Object key prefix to fetch from and publish to')
    s3_group.add_argument('--s3-region', help='Override S3_REGION')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='cutter',
        description='Batch crop images to fixed sizes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cutter run --path ./gallery --size 200x200 --size 400x400
  cutter run --fetch-remote --s3-bucket photos --s3-prefix gallery
  cutter plan --path ./gallery

Derived images are named <name>_<W>x<H>px_<W>w.jpg. Files with an underscore
in their name are treated as derived images and never used as sources.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    run_parser = subparsers.add_parser('run', help='Fetch, crop and publish images')
    run_parser.add_argument('-p', '--path', metavar='PATH',
                            help='Local directory of images to generate crops for')
    run_parser.add_argument('-o', '--overwrite', action='store_true',
                            help='Also fetch remote files that look like generated crops')
    run_parser.add_argument('--tmp-dir', default=DEFAULT_TMP_DIR,
                            help=f'Working directory for fetched files (default: {DEFAULT_TMP_DIR})')
    run_parser.add_argument('--no-clean', action='store_true',
                            help='Keep the working directory contents before fetching')
    run_parser.add_argument('-w', '--workers', type=int, metavar='N',
                            help='Number of worker threads')
    run_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress summary output')
    add_size_arguments(run_parser)
    add_remote_arguments(run_parser)

    plan_parser = subparsers.add_parser('plan', help='Show which crops would be generated')
    plan_parser.add_argument('-p', '--path', required=True, metavar='PATH',
                             help='Local directory of images')
    add_size_arguments(plan_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'run':
        return cmd_run(parsed_args)
    elif parsed_args.command == 'plan':
        return cmd_plan(parsed_args)

    return 1


if __name__ == '__main__':
    sys.exit(main())
