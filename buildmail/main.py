"""Command-line entry point: compose a build notification with attachments."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

from buildmail.attachments import (
    AttachmentService,
    JinjaTemplateExpander,
    TemplateExpansionError,
    build_message,
)
from buildmail.build import BuildContext, FileBuildLog
from buildmail.config import AppConfig, ConfigurationError, EnvironmentConfig, WorkspaceType
from buildmail.config.loader import load_config
from buildmail.config.sizes import SizeParseError, format_size, parse_size
from buildmail.diagnostics import DiagnosticsSink, LoggerDiagnostics, StreamDiagnostics
from buildmail.logging import get_logger
from buildmail.logging.config import configure_logging
from buildmail.workspace import LocalWorkspace, RemoteWorkspace, Workspace

logger = get_logger(__name__, component="cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildmail",
        description="Compose a build notification e-mail with workspace files and the build log attached",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to configuration file")
    parser.add_argument("--workspace", type=Path, default=None, help="Local workspace directory")
    parser.add_argument("--log-file", type=Path, default=None, help="Build console log file")
    parser.add_argument("--pattern", default=None, help="Attachment glob patterns, comma-separated")
    parser.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Template variable for patterns and subject (repeatable)",
    )
    parser.add_argument("--build-id", default="build", help="Build identifier (default: build)")
    parser.add_argument("--attach-log", action="store_true", help="Attach the build log")
    parser.add_argument("--compress-log", action="store_true", help="Attach the build log as build.zip")
    parser.add_argument("--max-size", default=None, help="Attachment ceiling, e.g. 10MB (0 = unlimited)")
    parser.add_argument("--subject", default=None, help="Message subject (may use placeholders)")
    parser.add_argument("--from", dest="sender", default=None, help="From address")
    parser.add_argument("--to", action="append", default=[], help="Recipient address (repeatable)")
    parser.add_argument("--output", type=Path, default=None, help="Write the .eml here (default: stdout)")
    parser.add_argument(
        "--console",
        default=None,
        metavar="PATH",
        help="Append attachment progress lines to this file (- for stderr)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def parse_variables(pairs: Sequence[str]) -> Dict[str, str]:
    """Parse repeated KEY=VALUE arguments.

    Raises:
        ConfigurationError: If a pair has no '=' or an empty key
    """
    variables = {}
    errors = []
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            errors.append(f"Invalid --var '{pair}': expected KEY=VALUE")
            continue
        variables[key.strip()] = value
    if errors:
        raise ConfigurationError("Invalid template variables", errors=errors)
    return variables


def load_runtime_config(args: argparse.Namespace) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and apply command-line overrides.

    Priority: CLI > environment > config file > defaults.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(args.config)

    if args.pattern is not None:
        app_config.attachments.pattern = args.pattern.strip()

    if args.max_size is not None:
        try:
            app_config.attachments.max_attachment_size = max(parse_size(args.max_size), 0)
        except SizeParseError as e:
            raise ConfigurationError(f"Invalid --max-size: {e}")

    if args.compress_log:
        app_config.attachments.attach_build_log = True
        app_config.attachments.compress_build_log = True
    elif args.attach_log:
        app_config.attachments.attach_build_log = True

    if args.workspace is not None:
        app_config.workspace.type = WorkspaceType.LOCAL.value
        app_config.workspace.path = str(args.workspace)

    if args.subject:
        app_config.message.subject = args.subject
    if args.sender:
        app_config.message.sender = args.sender
    if args.to:
        app_config.message.recipients = list(args.to)

    if args.log_level:
        app_config.logging.level = args.log_level

    return app_config, env_config


def build_workspace(app_config: AppConfig, env_config: EnvironmentConfig) -> Optional[Workspace]:
    """Create the configured workspace provider, or None when no workspace is set."""
    workspace_config = app_config.workspace

    if workspace_config.type == WorkspaceType.REMOTE:
        return RemoteWorkspace(
            base_url=workspace_config.url,
            node=workspace_config.node,
            timeout=workspace_config.timeout,
            user_agent=workspace_config.user_agent,
            token=env_config.workspace_token,
        )

    if workspace_config.path:
        return LocalWorkspace(workspace_config.path)

    return None


def open_console(target: Optional[str]) -> Tuple[DiagnosticsSink, Optional[TextIO]]:
    """Create the diagnostics sink for --console.

    Returns:
        The sink and the file it writes to, which the caller must close
        (None when nothing needs closing)

    Raises:
        ConfigurationError: If the console file cannot be opened
    """
    if not target:
        return LoggerDiagnostics(), None
    if target == "-":
        return StreamDiagnostics(sys.stderr, mirror_to_log=False), None

    try:
        stream = open(target, "a", encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot open --console file: {e}")
    return StreamDiagnostics(stream), stream


def render_subject(expander: JinjaTemplateExpander, subject: str, context: BuildContext) -> str:
    """Expand placeholders in the subject, keeping the raw text if that fails."""
    try:
        return expander.expand(subject, context.template_context()).strip().replace("\n", " ")
    except TemplateExpansionError as e:
        logger.warning(
            f"Using unexpanded subject: {e}",
            extra={"event": "message.subject.unexpanded"},
        )
        return subject


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for buildmail.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)
    console_stream = None

    try:
        variables = parse_variables(args.var)
        app_config, env_config = load_runtime_config(args)

        configure_logging(
            level=app_config.logging.level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        attachments_config = app_config.attachments
        logger.info(
            "buildmail starting",
            extra={
                "event": "service.starting",
                "build_id": args.build_id,
                "pattern": attachments_config.pattern,
                "max_attachment_size": format_size(attachments_config.max_attachment_size),
                "attach_build_log": attachments_config.attach_build_log,
                "compress_build_log": attachments_config.compress_build_log,
            },
        )

        diagnostics, console_stream = open_console(args.console)

        cancel_event = threading.Event()

        def signal_handler(signum, frame):
            logger.info(
                f"Received signal {signum}, cancelling attachment collection",
                extra={"event": "service.signal_received", "signal": signum},
            )
            cancel_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        context = BuildContext(
            build_id=args.build_id,
            workspace=build_workspace(app_config, env_config),
            build_log=FileBuildLog(args.log_file) if args.log_file else None,
            variables=variables,
            max_attachment_size=attachments_config.max_attachment_size,
            diagnostics=diagnostics,
            cancel_event=cancel_event,
        )

        expander = JinjaTemplateExpander()
        message = build_message(
            subject=render_subject(expander, app_config.message.subject, context),
            body=app_config.message.body,
            sender=app_config.message.sender,
            recipients=app_config.message.recipients,
        )

        service = AttachmentService(attachments_config.pattern, expander=expander)
        report = service.attach_all(
            message,
            context,
            attach_log=attachments_config.attach_build_log,
            compress_log=attachments_config.compress_build_log,
        )

        payload = message.as_bytes()
        if args.output:
            args.output.write_bytes(payload)
        else:
            sys.stdout.buffer.write(payload)
            sys.stdout.buffer.flush()

        logger.info(
            f"Message composed with {len(report.attached)} attachment(s)",
            extra={
                "event": "service.completed",
                "attached": report.attached,
                "message_bytes": len(payload),
                "output": str(args.output) if args.output else "stdout",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )

        return 1 if cancel_event.is_set() else 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Failed to write message: {e}", file=sys.stderr)
        return 1
    finally:
        if console_stream is not None:
            console_stream.close()


if __name__ == "__main__":
    sys.exit(main())
