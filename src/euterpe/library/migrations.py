"""Database migration system for schema versioning."""

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from .database import DatabaseConnection

logger = logging.getLogger(__name__)

# Migration files shipped with the package: NNN_description.sql
SCHEMA_DIR = Path(__file__).parent / "schema"


class MigrationRunner:
    """
    Manages database schema migrations.

    Features:
    - Tracks schema version in the schema_version table
    - Applies migrations in order
    - Idempotent (safe to run multiple times)
    - Each migration file wraps itself in BEGIN/COMMIT
    """

    def __init__(self, db: DatabaseConnection, schema_dir: Path = SCHEMA_DIR):
        """
        Initialize migration runner.

        Args:
            db: Database connection
            schema_dir: Directory containing migration SQL files
        """
        self.db = db
        self.schema_dir = schema_dir

    def get_current_version(self) -> int:
        """
        Get current schema version from database.

        Returns:
            Current version number (0 if schema_version table doesn't exist)
        """
        try:
            row = self.db.query_one("SELECT MAX(version) AS version FROM schema_version")
        except sqlite3.OperationalError:
            logger.debug("schema_version table not found, assuming version 0")
            return 0

        if row and row['version'] is not None:
            return row['version']
        return 0

    def _get_available_migrations(self) -> List[tuple[int, Path]]:
        """
        Get list of available migration files.

        Returns:
            List of (version, path) tuples sorted by version
        """
        migrations = []

        if not self.schema_dir.exists():
            logger.warning(f"Schema directory not found: {self.schema_dir}")
            return migrations

        for sql_file in self.schema_dir.glob("*.sql"):
            try:
                version = int(sql_file.stem.split('_')[0])
            except ValueError:
                logger.warning(f"Skipping invalid migration file: {sql_file.name}")
                continue
            migrations.append((version, sql_file))

        migrations.sort(key=lambda x: x[0])
        return migrations

    def apply_migrations(self, target_version: Optional[int] = None):
        """
        Apply pending migrations up to target version.

        Args:
            target_version: Version to migrate to (None = latest)

        Raises:
            sqlite3.Error: If migration fails
        """
        with self.db.lock:
            current_version = self.get_current_version()
            available_migrations = self._get_available_migrations()

            if not available_migrations:
                logger.info("No migrations found")
                return

            if target_version is None:
                target_version = max(v for v, _ in available_migrations)

            pending_migrations = [
                (version, path) for version, path in available_migrations
                if current_version < version <= target_version
            ]

            if not pending_migrations:
                logger.debug(f"Schema is up to date: version {current_version}")
                return

            logger.info(
                f"Applying {len(pending_migrations)} migration(s): "
                f"{{'from': {current_version}, 'to': {target_version}}}"
            )

            for version, migration_path in pending_migrations:
                self._apply_migration(version, migration_path)

    def _apply_migration(self, version: int, migration_path: Path):
        """
        Apply a single migration file.

        Raises:
            sqlite3.Error: If migration fails
        """
        logger.info(f"Applying migration {version}: {migration_path.name}")

        sql = migration_path.read_text(encoding='utf-8')

        try:
            self.db.executescript(sql)
        except sqlite3.Error as e:
            logger.error(f"Failed to apply migration {version}: {e}")
            # executescript stops at the failing statement with BEGIN still open
            self.db.connect().rollback()
            raise

    def verify_schema(self) -> bool:
        """
        Verify that database schema matches the latest available version.

        Returns:
            True if schema is up to date, False otherwise
        """
        available_migrations = self._get_available_migrations()
        if not available_migrations:
            logger.warning("No migrations found, cannot verify schema")
            return False

        current_version = self.get_current_version()
        latest_version = max(v for v, _ in available_migrations)

        if current_version < latest_version:
            logger.warning(
                f"Schema out of date: current={current_version}, latest={latest_version}"
            )
            return False
        return True
