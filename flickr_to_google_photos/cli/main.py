"""
Command line interface for the Flickr to Google Photos transfer tool.
"""
import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from flickr_to_google_photos import __version__
from flickr_to_google_photos.auth.google_oauth import run_google_oauth
from flickr_to_google_photos.config import AppConfig, DEFAULT_CONFIG_PATH
from flickr_to_google_photos.exceptions import MigrationError
from flickr_to_google_photos.models import TransferOptions
from flickr_to_google_photos.source import create_source_catalog
from flickr_to_google_photos.transfer.orchestrator import TransferOrchestrator
from flickr_to_google_photos.uploader.google_photos import GooglePhotosClient
from flickr_to_google_photos.utils.job_tracker import JobTracker
from flickr_to_google_photos.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='flickr-to-google',
        description='Transfer Flickr albums and photos to Google Photos'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f'Path to configuration file (default: {DEFAULT_CONFIG_PATH})'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    subparsers.add_parser('setup', help='Interactively write the configuration file')
    subparsers.add_parser('authenticate', help='Authorize access to Google Photos (and Flickr)')

    list_parser = subparsers.add_parser('list-albums', help='List source albums')
    list_parser.add_argument('--data-dir', help='Flickr export directory to read')

    transfer_parser = subparsers.add_parser('transfer', help='Transfer albums to Google Photos')
    transfer_parser.add_argument('--album', help='Only transfer the album with this id')
    transfer_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be transferred without uploading anything'
    )
    transfer_parser.add_argument('--batch-size', type=_positive_int,
                                 help='Photos per chunk (default from config)')
    transfer_parser.add_argument('--data-dir', help='Flickr export directory to read')
    transfer_parser.add_argument('--sleep-time-between-batches', type=_non_negative_int,
                                 help='Pause between chunks in milliseconds')

    status_parser = subparsers.add_parser('status', help='Show transfer job status')
    status_parser.add_argument('--job-id', help='Show a single job')

    return parser


def cmd_setup(config_path: str) -> None:
    """Prompt for credentials and write the configuration file."""
    config = AppConfig.load(config_path)
    gp = config.google_photos
    flickr = config.flickr

    print("Google Photos API credentials (https://console.cloud.google.com/apis/credentials)")
    gp.client_id = _prompt("Client ID", gp.client_id)
    gp.client_secret = _prompt("Client secret", gp.client_secret, secret=True)

    source = _prompt("Flickr source ('export' or 'api')", flickr.source)
    if source not in ('export', 'api'):
        raise MigrationError(f"Invalid flickr source: {source}")
    flickr.source = source
    if source == 'export':
        flickr.data_directory = _prompt("Flickr export directory", flickr.data_directory)
    else:
        flickr.api_key = _prompt("Flickr API key", flickr.api_key)
        flickr.api_secret = _prompt("Flickr API secret", flickr.api_secret, secret=True)

    path = config.to_yaml(config_path)
    logger.info(f"✓ Configuration written to {path}")
    logger.info('Next, run "flickr-to-google authenticate"')


def _prompt(label: str, current: Optional[str], secret: bool = False) -> Optional[str]:
    suffix = " [keep current]" if (current and secret) else (f" [{current}]" if current else "")
    reader = getpass.getpass if secret else input
    value = reader(f"{label}{suffix}: ").strip()
    return value or current


def cmd_authenticate(config: AppConfig) -> None:
    run_google_oauth(config.google_photos)
    if config.flickr.source == 'api':
        from flickr_to_google_photos.source.flickr_api import FlickrApiCatalog
        FlickrApiCatalog(config.flickr.api_key, config.flickr.api_secret).authenticate()


def build_orchestrator(config: AppConfig, data_directory: Optional[str] = None) -> TransferOrchestrator:
    source = create_source_catalog(config.flickr, data_directory)
    destination = GooglePhotosClient(
        config.google_photos,
        max_retries=config.transfer.max_retries,
        retry_delay=config.transfer.retry_delay,
    )
    return TransferOrchestrator(source, destination,
                                job_tracker=JobTracker(config.transfer.job_storage_path))


def cmd_transfer(config: AppConfig, args: argparse.Namespace) -> None:
    options = TransferOptions(
        album_id=args.album,
        dry_run=args.dry_run,
        batch_size=args.batch_size or config.transfer.batch_size,
        sleep_time_between_batches=(
            args.sleep_time_between_batches
            if args.sleep_time_between_batches is not None
            else config.transfer.sleep_time_between_batches
        ),
        data_directory=args.data_dir,
    )
    build_orchestrator(config, options.data_directory).transfer_albums(options)
    logger.info("✓ Transfer finished")


def cmd_status(config: AppConfig, job_id: Optional[str]) -> bool:
    tracker = JobTracker(config.transfer.job_storage_path)
    orchestrator = TransferOrchestrator(source=None, destination=None, job_tracker=tracker)
    result = orchestrator.check_transfer_status(job_id)
    return not (job_id and result is None)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    if args.command == 'setup':
        setup_logging(log_file=None)
        try:
            cmd_setup(args.config)
        except (MigrationError, ValueError) as e:
            logger.error(f"✗ {e}")
            return 1
        return 0

    try:
        config = AppConfig.load(args.config)
    except MigrationError as e:
        setup_logging(log_file=None)
        logger.error(f"✗ {e}")
        return 1

    setup_logging(
        log_file=config.logging.file,
        level=config.logging.level,
        json_format=config.logging.json_format,
        rotate=config.logging.rotate,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count,
        separate_error_log=config.logging.separate_error_log,
    )
    logger.debug(f"Loaded configuration from {Path(args.config).resolve()}")

    try:
        if args.command == 'authenticate':
            cmd_authenticate(config)
        elif args.command == 'list-albums':
            build_orchestrator(config, args.data_dir).list_albums()
        elif args.command == 'transfer':
            cmd_transfer(config, args)
        elif args.command == 'status':
            if not cmd_status(config, args.job_id):
                return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 1
    except MigrationError as e:
        logger.error(f"✗ {e}")
        return 1
    except Exception as e:
        logger.error(f"✗ Unexpected error: {e}", exc_info=True)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
