"""Main CLI entry point for the knosys-migrate command.

This module provides the Typer application that serves as the entry point
for the knosys-migrate command-line tool:

    knosys-migrate migrate EXPORT.json --space-key TEAM
    knosys-migrate spaces
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.auth import Authenticator
from src.confluence_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    MigrationError,
    ValidationError,
)
from src.migration.config import ConfigLoader
from src.migration.errors import FilesystemError
from src.migration.pipeline import MigrationPipeline
from src.page_operations.page_operations import PageOperations

app = typer.Typer(
    name="knosys-migrate",
    help="""Migrate Knosys knowledge-base exports into Confluence pages.

QUICK START:
  knosys-migrate migrate export.json --space-key TEAM          # Create a page
  knosys-migrate migrate export.json --space-id 10 --page-id 123456   # Update a page
  knosys-migrate spaces                                         # List spaces""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"knosys-migrate_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _exit_code_for(error: Exception) -> ExitCode:
    if isinstance(error, ValidationError):
        return ExitCode.VALIDATION_ERROR
    if isinstance(error, (InvalidCredentialsError, APIAccessError)):
        return ExitCode.AUTH_ERROR
    if isinstance(error, APIUnreachableError):
        return ExitCode.NETWORK_ERROR
    return ExitCode.GENERAL_ERROR


def _load_payload(json_file: str, overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Build a migration request from a JSON file and command-line options.

    The file holds either a whole request (with the tree under "json") or
    just the export tree. Options given on the command line win.

    Raises:
        FilesystemError: If the file cannot be read
        ValidationError: If the file is not valid JSON
    """
    try:
        with open(json_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FilesystemError(json_file, 'read', 'File not found')
    except PermissionError:
        raise FilesystemError(json_file, 'read', 'Permission denied')
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {json_file}: {e}")

    if isinstance(data, dict) and "json" in data:
        payload = dict(data)
    else:
        payload = {"json": data}

    for key, value in overrides.items():
        if value is not None:
            payload[key] = value
    return payload


@app.command()
def migrate(
    json_file: str = typer.Argument(
        ...,
        help="Export JSON file (a whole request, or just the export tree)",
        metavar="JSON_FILE",
    ),
    space_id: Optional[str] = typer.Option(
        None, "--space-id", help="Numeric id of the target space",
    ),
    space_key: Optional[str] = typer.Option(
        None, "--space-key", help="Key of the target space",
    ),
    page_id: Optional[str] = typer.Option(
        None, "--page-id", help="Update this page instead of creating one",
    ),
    title: Optional[str] = typer.Option(
        None, "--title", help="Title of the migrated page",
    ),
    parent_id: Optional[str] = typer.Option(
        None, "--parent-id", "--create-as-child-of",
        help="Create the page under this parent page",
    ),
    shared_space: Optional[str] = typer.Option(
        None, "--shared-space", help="Hub space for shared paragraphs (key or id)",
    ),
    image_space: Optional[str] = typer.Option(
        None, "--image-space", help="Hub space for images (key or id)",
    ),
    config_path: str = typer.Option(
        ConfigLoader.DEFAULT_CONFIG_FILE, "--config", help="Configuration file",
    ),
    logdir: Optional[str] = typer.Option(
        None, "--logdir", help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0, "--verbosity", "-v", help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable colored output",
    ),
) -> None:
    """Migrate one export tree into a Confluence page."""
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)
    pages: Optional[PageOperations] = None

    try:
        config = ConfigLoader.load(config_path)
        payload = _load_payload(json_file, {
            "spaceId": space_id,
            "spaceKey": space_key,
            "pageId": page_id,
            "title": title,
            "createAsChildOf": parent_id,
            "sharedParagraphSpaceKey": shared_space,
            "imageHubSpaceKey": image_space,
        })

        pipeline = MigrationPipeline(config=config)
        pages = PageOperations(pipeline.api, version_message=config.version_message)
        with output.spinner("Migrating..."):
            result = pipeline.run(payload, pages)

        output.success(f"Page {result.action.value}: {result.page.title}")
        output.print_publish_summary(result.to_response(), pages.committed)
        raise typer.Exit(ExitCode.SUCCESS)

    except typer.Exit:
        raise

    except MigrationError as e:
        logger.error(f"Migration failed: {e}")
        output.error(f"Migration failed: {e}")
        if pages is not None:
            output.print_committed(pages.committed)
        raise typer.Exit(_exit_code_for(e))

    except Exception as e:
        logger.exception("Unexpected error during migration")
        output.error(f"Unexpected error: {e}")
        if pages is not None:
            output.print_committed(pages.committed)
        raise typer.Exit(ExitCode.GENERAL_ERROR)


@app.command()
def spaces(
    verbosity: int = typer.Option(
        0, "--verbosity", "-v", help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable colored output",
    ),
) -> None:
    """List the Confluence spaces visible to the primary identity."""
    _configure_logging(verbosity)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        api = APIWrapper(Authenticator())
        count = output.print_spaces(api.list_spaces())
        output.info(f"{count} space(s)")
        raise typer.Exit(ExitCode.SUCCESS)

    except typer.Exit:
        raise

    except MigrationError as e:
        logger.error(f"Listing spaces failed: {e}")
        output.error(f"Failed to fetch spaces: {e}")
        raise typer.Exit(_exit_code_for(e))


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


if __name__ == "__main__":
    main()
