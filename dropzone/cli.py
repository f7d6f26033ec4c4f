"""Command line interface for the dropzone package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from rich.logging import RichHandler

from .cli_progress import (
    UploadStateDisplay,
    console,
    render_configuration_summary,
    render_dropzone,
    render_error,
    render_file,
    render_files,
    render_json,
    render_permissions,
)
from .client import DropzoneClient
from .errors import DropzoneError
from .models import ClientConfig, RuntimeContext, UploadSource

logger = logging.getLogger(__name__)

RESOURCE_KINDS = ("dropzone", "file")
DEFAULT_ENV_FILE = ".env"


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    # keep transport chatter out of --debug unless asked for
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(level, logging.WARNING))
    return logging.getLevelName(level)


def _parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    """Parse ``KEY=value`` (optionally ``export``-prefixed, optionally quoted)."""
    line = line.strip()
    if line.startswith("export "):
        line = line[7:].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, _, value = line.partition("=")
    key, value = key.strip(), value.strip()
    if value[:1] in ("'", '"') and len(value) > 1 and value[-1] == value[0]:
        value = value[1:-1]
    return (key, value) if key else None


def _load_env_file(path: Path) -> Dict[str, str]:
    """Apply a .env file to os.environ; variables already set in the shell win.

    Returns the variables that were applied.
    """
    if not path.is_file():
        raise CLIError(f"env file not found: {path}")
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    applied = {}
    for entry in filter(None, map(_parse_env_line, lines)):
        key, value = entry
        if key not in os.environ:
            os.environ[key] = applied[key] = value
    logger.debug("Loaded %d variable(s) from %s", len(applied), path)
    return applied


def _build_config(args: argparse.Namespace) -> ClientConfig:
    env_config = ClientConfig.from_env()
    return ClientConfig(
        base_url=args.base_url or env_config.base_url,
        api_key=args.api_key or env_config.api_key,
        dropzone_id=args.dropzone_id or env_config.dropzone_id,
        timeout=args.timeout if args.timeout is not None else env_config.timeout,
    )


def _mask(secret: Optional[str]) -> str:
    if not secret:
        return "-"
    if len(secret) <= 8:
        return "****"
    return f"{secret[:4]}...{secret[-4:]}"


async def _run_command(args: argparse.Namespace, config: ClientConfig) -> int:
    command = args.command

    async with DropzoneClient(config=config, context=RuntimeContext.detect()) as client:
        if command == "create":
            render_dropzone(await client.create_dropzone(args.gb, args.days, args.name))
        elif command == "info":
            render_dropzone(await client.get_dropzone(args.dropzone_id))
        elif command == "ls":
            render_files(await client.list_files(args.dropzone_id))
        elif command == "upload":
            display = UploadStateDisplay(quiet=args.quiet)
            client.on_upload_state(display.on_state)
            sources = []
            for raw_path in args.paths:
                path = Path(raw_path).expanduser()
                if not path.is_file():
                    raise CLIError(f"not a file: {path}")
                sources.append(UploadSource.from_path(path, args.content_type))
            render_files(await client.upload_files(sources, args.dropzone))
        elif command == "stat":
            render_file(await client.get_file(args.file_id))
        elif command == "download":
            data = await client.download_file(args.file_id)
            if args.output in (None, "-"):
                sys.stdout.buffer.write(data)
                sys.stdout.buffer.flush()
            else:
                Path(args.output).expanduser().write_bytes(data)
                console.print(f"saved {len(data)} bytes to {args.output}", markup=False)
        elif command == "rm":
            render_json(await client.delete_file(args.file_id))
        elif command == "url":
            console.print(client.get_file_url(args.file_id), soft_wrap=True, markup=False)
        elif command in ("grant", "revoke"):
            method = getattr(client, f"{command}_{args.kind}_permissions")
            render_permissions(await method(args.resource_id, args.public_id, args.permissions))
        elif command == "perms":
            method = getattr(client, f"get_{args.kind}_permissions")
            render_permissions(await method(args.resource_id, args.public_id))
        elif command == "transfer":
            render_json(await client.transfer_gb_months(args.to_api_key, args.gb_months))
        elif command == "whoami":
            render_json(await client.get_api_key_info())
        else:
            raise CLIError(f"unknown command: {command}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dropzone",
        description="Manage dropzones and files on the Dropzone file-storage API.",
    )
    parser.add_argument("--base-url", default=None, help="API base URL (default DROPZONE_BASE_URL)")
    parser.add_argument("--api-key", default=None, help="API key (default DROPZONE_API_KEY)")
    parser.add_argument(
        "--dropzone-id",
        default=None,
        help="Bind the client to one dropzone (default DROPZONE_ID)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print the resolved configuration before running",
    )
    parser.add_argument("--version", action="version", version="dropzone (dropzone-client)")

    sub = parser.add_subparsers(dest="command")

    create = sub.add_parser("create", help="Create a dropzone (consumes GB-months)")
    create.add_argument("--gb", type=float, required=True)
    create.add_argument("--days", type=int, required=True)
    create.add_argument("--name", default=None)

    info = sub.add_parser("info", help="Show dropzone details")
    info.add_argument("dropzone_id")

    ls = sub.add_parser("ls", help="List files in a dropzone")
    ls.add_argument("dropzone_id")

    upload = sub.add_parser("upload", help="Upload one or more files")
    upload.add_argument("paths", nargs="+")
    upload.add_argument(
        "-d",
        "--dropzone",
        default=None,
        help="Target dropzone (optional when --dropzone-id binds the client)",
    )
    upload.add_argument("-t", "--content-type", default=None, help="Override MIME type")
    upload.add_argument("-q", "--quiet", action="store_true", help="Hide per-step status lines")

    stat = sub.add_parser("stat", help="Show file details")
    stat.add_argument("file_id")

    download = sub.add_parser("download", help="Download a file")
    download.add_argument("file_id")
    download.add_argument("-o", "--output", default=None, help="Output path ('-' for stdout)")

    rm = sub.add_parser("rm", help="Delete a file")
    rm.add_argument("file_id")

    url = sub.add_parser("url", help="Print the URL of a file (no network call)")
    url.add_argument("file_id")

    for name, help_text in (("grant", "Grant permissions"), ("revoke", "Revoke permissions")):
        perm = sub.add_parser(name, help=help_text)
        perm.add_argument("kind", choices=RESOURCE_KINDS)
        perm.add_argument("resource_id")
        perm.add_argument("public_id")
        perm.add_argument("permissions", nargs="+")

    perms = sub.add_parser("perms", help="Show permissions")
    perms.add_argument("kind", choices=RESOURCE_KINDS)
    perms.add_argument("resource_id")
    perms.add_argument("public_id", nargs="?", default=None)

    transfer = sub.add_parser("transfer", help="Transfer GB-months to another API key")
    transfer.add_argument("to_api_key")
    transfer.add_argument("gb_months", type=float)

    sub.add_parser("whoami", help="Show API key information")
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file
    if used_env_file is None and Path(DEFAULT_ENV_FILE).is_file():
        used_env_file = Path(DEFAULT_ENV_FILE)
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            render_error(str(exc))
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = _build_config(args)
    except ValueError as exc:
        render_error(f"invalid configuration: {exc}")
        return 1

    if args.show_config:
        render_configuration_summary(
            {
                "Base URL": config.base_url,
                "API Key": _mask(config.api_key),
                "Dropzone": config.dropzone_id or "-",
                "Timeout": f"{config.timeout:g}s",
                "Env File": str(used_env_file) if used_env_file else "-",
                "Logging": effective_log_mode,
            }
        )

    try:
        return asyncio.run(_run_command(args, config))
    except (CLIError, DropzoneError) as exc:
        logger.debug("command %s failed", args.command, exc_info=True)
        render_error(str(exc))
        return 1
    except KeyboardInterrupt:
        render_error("cancelled")
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
