"""
Command-line interface for the mobile test harness.

Provides operator commands:
- Appium server run / status
- Automation toolchain installation
- Shell profile update and verification
- Desktop browser launch
"""

import sys
import argparse
import logging
import json
import threading
from enum import Enum
from pathlib import Path
from typing import Optional, List

from config import LOG_FORMAT, ServerConfig
from server_mgmt import (
    AppiumServerError,
    AppiumServerManager,
    fetch_status_code,
)
from env_setup import (
    EnvironmentInstaller,
    ShellProfileUpdater,
    ToolStatus,
)
from automation import BrowserLauncher


logger = logging.getLogger(__name__)


class ExitCode(int, Enum):
    """CLI exit codes"""
    SUCCESS = 0
    ERROR = 1
    INVALID_ARGS = 2


class OutputFormat(str, Enum):
    """Output format options"""
    TEXT = "text"
    JSON = "json"


def setup_logging(verbose: int, log_file: Optional[str] = None) -> None:
    """
    Setup logging based on verbosity level.

    Args:
        verbose: Verbosity count (0=WARNING, 1=INFO, 2+=DEBUG)
        log_file: Optional file to log to instead of stderr
    """
    if verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT if log_file else '%(levelname)s: %(message)s',
        filename=log_file
    )


def server_config_from_args(args) -> ServerConfig:
    """Environment-derived server config with command-line overrides applied"""
    return ServerConfig.from_env(
        host=args.host,
        port=args.port,
        startup_retries=args.retries,
        retry_delay=args.retry_delay,
        log_file_path=args.log_file,
        show_logs=True if args.show_logs else None,
        base_path=args.base_path,
    )


def cmd_server_run(args, stop_event: Optional[threading.Event] = None) -> int:
    """
    Start an Appium server and keep it running until interrupted.

    Args:
        args: Parsed command arguments
        stop_event: Event that ends the run (defaults to waiting for Ctrl-C)

    Returns:
        Exit code
    """
    try:
        config = server_config_from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.INVALID_ARGS.value

    manager = AppiumServerManager(config)
    try:
        manager.start()
    except AppiumServerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.ERROR.value

    print(f"Appium server running at {config.server_url} (Ctrl-C to stop)")
    stop_event = stop_event or threading.Event()
    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        print("\nStopping Appium server...")
    finally:
        manager.stop()

    return ExitCode.SUCCESS.value


def cmd_server_status(args) -> int:
    """
    Probe the Appium status endpoint once.

    Args:
        args: Parsed command arguments

    Returns:
        SUCCESS if the server answered 200, ERROR otherwise
    """
    try:
        config = server_config_from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.INVALID_ARGS.value

    status_code = None
    error = None
    try:
        status_code = fetch_status_code(
            config.status_url,
            config.connection_timeout,
            config.read_timeout
        )
    except Exception as e:
        error = str(e)

    running = status_code == 200

    if args.format == OutputFormat.JSON.value:
        output = {
            "url": config.status_url,
            "running": running,
            "status_code": status_code,
            "error": error,
        }
        print(json.dumps(output, indent=2))
    else:
        state = "✓ running" if running else "✗ not running"
        print(f"Appium server at {config.status_url}: {state}")
        if status_code is not None and not running:
            print(f"  HTTP {status_code}")
        if error:
            print(f"  {error}")

    return ExitCode.SUCCESS.value if running else ExitCode.ERROR.value


def cmd_setup_env(args) -> int:
    """
    Install the automation toolchain.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code
    """
    profile = ShellProfileUpdater(profile_path=args.profile)
    installer = EnvironmentInstaller(profile=profile)

    failed = False
    try:
        installer.run(skip=args.skip or ())
    except Exception as e:
        logger.debug("Installer failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        failed = True

    if args.format == OutputFormat.JSON.value:
        output = {
            "results": [
                {
                    "tool": result.tool,
                    "status": result.status.value,
                    "duration": round(result.duration, 2),
                    "message": result.message,
                }
                for result in installer.summary
            ]
        }
        print(json.dumps(output, indent=2))
    else:
        print("=== Environment Setup Summary ===\n")
        for result in installer.summary:
            print(f"  {result}")

    if failed or any(r.status == ToolStatus.FAILED for r in installer.summary):
        return ExitCode.ERROR.value
    return ExitCode.SUCCESS.value


def cmd_update_profile(args) -> int:
    """
    Update and verify the shell profile.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code
    """
    updater = ShellProfileUpdater(profile_path=args.profile)

    try:
        update = None if args.verify_only else updater.update()
        report = updater.verify()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.ERROR.value

    if args.format == OutputFormat.JSON.value:
        output = {
            "profile": str(updater.profile_path),
            "changes": update.changes if update else [],
            "backup": str(update.backup_path) if update and update.backup_path else None,
            "verified": report.ok,
            "path_export": report.path_export,
            "warnings": report.warnings,
        }
        print(json.dumps(output, indent=2))
    else:
        print(f"=== Profile: {updater.profile_path} ===\n")
        if update is not None:
            if update.modified:
                for change in update.changes:
                    print(f"  ✓ {change}")
                if update.backup_path:
                    print(f"  Backup: {update.backup_path}")
            else:
                print("  No changes were needed. Everything is up to date.")
        if report.path_export:
            print(f"\nPATH export: {report.path_export}")
        for warning in report.warnings:
            print(f"  ⚠ {warning}")
        print("\n✓ Verified" if report.ok else "\n✗ Verification failed")

    return ExitCode.SUCCESS.value if report.ok else ExitCode.ERROR.value


def cmd_open_browser(args) -> int:
    """
    Open Chrome on a URL for a fixed number of seconds.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code
    """
    launcher = BrowserLauncher(executable=args.chrome)

    def tick(remaining: int) -> None:
        print(f"\rClosing in: {remaining} seconds   ", end="", flush=True)

    try:
        launcher.open_for(args.url, args.seconds, tick=tick)
    except (OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.ERROR.value
    except KeyboardInterrupt:
        pass

    print()
    return ExitCode.SUCCESS.value


def add_server_options(parser: argparse.ArgumentParser) -> None:
    """Server connection options shared by the server subcommands"""
    parser.add_argument('--host', help='Server address (default: APPIUM_HOST or 127.0.0.1)')
    parser.add_argument('--port', type=int, help='Server port (default: APPIUM_PORT or 4723)')
    parser.add_argument('--base-path', help='Appium base path (default: /wd/hub)')
    parser.add_argument('--retries', type=int, help='Start attempts')
    parser.add_argument('--retry-delay', type=float, help='Seconds between start attempts')
    parser.add_argument('--log-file', help='Server output file')
    parser.add_argument(
        '--show-logs',
        action='store_true',
        help='Run the server with debug logging'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mobile-harness",
        description="Mobile test harness CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s server run --port 4723       # Start Appium and keep it running
  %(prog)s server status                # Check whether Appium answers
  %(prog)s setup-env --skip xcuitest    # Install the toolchain
  %(prog)s update-profile --verify-only # Check ~/.zshrc
  %(prog)s open-browser https://www.google.com --seconds 30
        """
    )

    # Global options
    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (can be repeated: -v, -vv)'
    )
    parser.add_argument(
        '--format',
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.TEXT.value,
        help='Output format'
    )
    parser.add_argument(
        '--log',
        dest='cli_log_file',
        help='Write logs to this file instead of stderr'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Server command
    server_parser = subparsers.add_parser('server', help='Manage a local Appium server')
    server_sub = server_parser.add_subparsers(dest='action', help='Server action')
    add_server_options(server_sub.add_parser('run', help='Start and keep running'))
    add_server_options(server_sub.add_parser('status', help='Probe the status endpoint'))

    # Setup command
    setup_parser = subparsers.add_parser('setup-env', help='Install the automation toolchain')
    setup_parser.add_argument(
        '--skip',
        action='append',
        metavar='TOOL',
        help='Tool to skip (homebrew, node, chrome, appium, selenium, uiautomator2, xcuitest)'
    )
    setup_parser.add_argument('--profile', type=Path, help='Shell profile (default: ~/.zshrc)')

    # Profile command
    profile_parser = subparsers.add_parser('update-profile', help='Fix PATH in the shell profile')
    profile_parser.add_argument('--profile', type=Path, help='Shell profile (default: ~/.zshrc)')
    profile_parser.add_argument(
        '--verify-only',
        action='store_true',
        help='Only verify, do not modify'
    )

    # Browser command
    browser_parser = subparsers.add_parser('open-browser', help='Open Chrome on a URL')
    browser_parser.add_argument('url', help='Page to open')
    browser_parser.add_argument('--seconds', type=int, default=60, help='How long to keep it open')
    browser_parser.add_argument('--chrome', help='Chrome executable path')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.cli_log_file)

    if not args.command:
        parser.print_help()
        return ExitCode.SUCCESS.value

    if args.command == 'server':
        if args.action == 'run':
            return cmd_server_run(args)
        elif args.action == 'status':
            return cmd_server_status(args)
        print("Error: server requires an action (run, status)", file=sys.stderr)
        return ExitCode.INVALID_ARGS.value
    elif args.command == 'setup-env':
        return cmd_setup_env(args)
    elif args.command == 'update-profile':
        return cmd_update_profile(args)
    elif args.command == 'open-browser':
        return cmd_open_browser(args)
    else:
        print(f"Error: Unknown command '{args.command}'", file=sys.stderr)
        return ExitCode.INVALID_ARGS.value


if __name__ == '__main__':
    sys.exit(main())
