"""Command-line entry point for ComradeZone maintenance tasks."""

import argparse
import asyncio
import logging
import sys
from datetime import timedelta

from sqlalchemy import func, select

from .config import load_config
from .orm import User, UserRole
from .services import RateLimitService, get_db_service, init_db_service


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from libraries
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


async def prune_rate_limits(config, logger) -> int:
    """Remove anonymous chat limit records idle for longer than configured."""
    service = RateLimitService(
        limit=config.rate_limit.anonymous_message_limit,
        window=timedelta(hours=config.rate_limit.window_hours),
    )
    removed = await service.prune_stale(timedelta(days=config.rate_limit.prune_after_days))
    logger.info("Removed %d record(s)", removed)
    return 0


async def make_admin(email: str, logger) -> int:
    """Promote an existing account to admin."""
    db = get_db_service()
    async with db.session() as session:
        result = await session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        user = result.scalar_one_or_none()
        if user is None:
            logger.error("No user with email %s", email)
            return 1
        if user.is_admin:
            logger.info("%s is already an admin", email)
            return 0
        user.role = UserRole.ADMIN.value

    logger.info("Promoted %s to admin", email)
    return 0


async def async_main(args, logger) -> int:
    """Load config, open the database and run the selected command."""
    try:
        logger.info("Loading configuration from %s", args.config)
        config = load_config(args.config)

        logger.info("Initializing database at %s", config.database.path)
        await init_db_service(config.database.path)

        if args.command == "init-db":
            logger.info("Database initialized successfully")
            return 0
        if args.command == "prune":
            return await prune_rate_limits(config, logger)
        if args.command == "make-admin":
            return await make_admin(args.email, logger)

        logger.error("Unknown command: %s", args.command)
        return 2

    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1
    finally:
        try:
            db = get_db_service()
            await db.close()
        except RuntimeError:
            # Database wasn't initialized (error during startup)
            pass


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="ComradeZone moderation, rate limit and notification maintenance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s init-db                          # Create tables using config.yaml
  %(prog)s -c prod.yaml prune               # Drop stale anonymous chat limits
  %(prog)s make-admin someone@kabarak.ac.ke # Promote a user to admin
        """,
    )

    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init-db", help="Create database tables")
    subparsers.add_parser("prune", help="Delete stale anonymous chat limit records")
    admin_parser = subparsers.add_parser("make-admin", help="Grant the admin role to a user")
    admin_parser.add_argument("email", help="Email of an existing user")

    args = parser.parse_args()

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    return asyncio.run(async_main(args, logger))


if __name__ == "__main__":
    sys.exit(main())
