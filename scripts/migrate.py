"""Run or create Alembic migrations.

Usage:
    python scripts/migrate.py                   upgrade to head
    python scripts/migrate.py down [revision]   downgrade (default: one step)
    python scripts/migrate.py create <message>  autogenerate a revision
"""

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def _config() -> Config:
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    return config


def upgrade() -> None:
    print("Upgrading database to head...")
    command.upgrade(_config(), "head")
    print("✓ Database is up to date")


def downgrade(revision: str = "-1") -> None:
    print(f"Downgrading database to {revision}...")
    command.downgrade(_config(), revision)
    print("✓ Downgrade complete")


def create_migration(message: str) -> None:
    print(f"Creating migration: {message}")
    command.revision(_config(), message=message, autogenerate=True)
    print("✓ Migration created")


def main(argv: list[str]) -> int:
    try:
        if not argv:
            upgrade()
        elif argv[0] == "down":
            downgrade(argv[1] if len(argv) > 1 else "-1")
        elif argv[0] == "create" and len(argv) > 1:
            create_migration(" ".join(argv[1:]))
        else:
            print(__doc__)
            return 2
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
