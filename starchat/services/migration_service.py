import logging
import subprocess
import sys
from pathlib import Path

from starchat.core.config import settings

logger = logging.getLogger(__name__)

# Directory holding alembic.ini
PROJECT_ROOT = Path(__file__).parent.parent.parent


def _sqlite_file_path(database_url: str) -> Path | None:
    """Filesystem path of a file-backed SQLite URL, or None for anything else."""
    if not database_url.startswith("sqlite") or ":memory:" in database_url:
        return None
    _, _, path = database_url.partition(":///")
    return Path(path) if path else None


async def run_migrations():
    """Run database migrations with ``alembic upgrade head``."""
    try:
        logger.info("Running database migrations...")

        # SQLite will not create the directory for its database file
        db_path = _sqlite_file_path(settings.DATABASE_URL)
        if db_path is not None and not db_path.parent.exists():
            logger.info(f"Creating database directory: {db_path.parent}")
            db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            subprocess.run(
                ["alembic", "--version"],
                check=True,
                capture_output=True,
                text=True,
            )
            alembic_cmd = ["alembic"]
        except (subprocess.CalledProcessError, FileNotFoundError):
            alembic_cmd = [sys.executable, "-m", "alembic"]

        result = subprocess.run(
            alembic_cmd + ["upgrade", "head"],
            check=True,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
        )
        logger.info("Migrations completed successfully")
        if result.stdout:
            logger.info(f"Alembic output: {result.stdout}")

    except subprocess.CalledProcessError as e:
        logger.error(f"Migration failed with exit code {e.returncode}")
        if e.stdout:
            logger.error(f"Stdout: {e.stdout}")
        if e.stderr:
            logger.error(f"Stderr: {e.stderr}")
        raise RuntimeError("Database migration failed") from e
    except OSError as e:
        logger.error(f"Unexpected error during migration: {e}")
        raise RuntimeError("Database migration failed") from e
