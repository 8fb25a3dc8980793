"""Entry point for maven-build-mcp server."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from .config import BuildSettings
from .server import create_server, get_manager
from .utils.project import configure_project_root, find_maven_project_root


def configure_logging() -> None:
    """Configure logging based on environment."""
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Maven Build MCP Server - stage dependencies and build Maven projects via MCP"
    )
    parser.add_argument(
        "--project",
        type=str,
        default=None,
        help="Maven project root. Defaults to the current directory.",
    )
    parser.add_argument(
        "--project-from-cwd",
        action="store_true",
        default=False,
        help="Auto-detect project from current working directory. "
        "Searches upward for mvnw, pom.xml or .git markers. "
        "Cannot be used with --project.",
    )
    parser.add_argument(
        "--java-home",
        type=str,
        default=None,
        help="JDK home passed to Maven as JAVA_HOME (default: inherited).",
    )
    parser.add_argument(
        "--skip-tests",
        action="store_true",
        default=None,
        help="Add -DskipTests to clean install.",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for build-logs.txt (default: system temp dir).",
    )
    return parser.parse_args(argv)


async def main() -> None:
    """Main entry point."""
    configure_logging()
    logger = logging.getLogger(__name__)

    args = parse_args()

    if args.project_from_cwd:
        if args.project is not None:
            logger.error("--project-from-cwd cannot be used with --project")
            sys.exit(1)
        project_path = str(find_maven_project_root())
        logger.info(f"Auto-detected project root: {project_path}")
    else:
        project_path = args.project or os.getcwd()

    configure_project_root(
        use_project_from_cwd=args.project_from_cwd,
        explicit_project_path=args.project,
        startup_cwd=Path.cwd(),
    )

    try:
        settings = BuildSettings.from_env().with_overrides(
            java_home=args.java_home,
            skip_tests=args.skip_tests,
            log_dir=args.log_dir,
        )
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info(f"Starting Maven Build MCP Server (project: {project_path})...")

    mcp = create_server(project_path, settings)

    try:
        await mcp.run_stdio_async()
    except Exception:
        logger.exception("Server error")
        raise
    finally:
        cancelled = get_manager().cancel_all()
        if cancelled:
            logger.info(f"Flagged {cancelled} build sessions as cancelled")
        logger.info("Server stopped")


def run() -> None:
    """Run the server."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
