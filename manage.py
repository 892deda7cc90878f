# manage.py
import sys

from app import create_app, shutdown
from tunevault.database.db_manager import db
from tunevault.errors import TuneVaultError


def create_db(app):
    """Creates the database tables."""
    with app.app_context():
        db.create_all()
        print(f"Database tables ready at {app.config['SQLALCHEMY_DATABASE_URI']}")
    return 0


def sync(app):
    """Reconcile the bucket listing into the catalog."""
    with app.app_context():
        result = app.extensions['synchronizer'].sync_bucket()
    print(result.message)
    print(
        f"listed={result.listed_count} added={result.added_count} "
        f"existing={result.skipped_count} conflicts={result.conflict_count} ignored={result.ignored_count}"
    )
    return 0


COMMANDS = {
    'create_db': create_db,
    'sync': sync,
}

USAGE = "Usage: python manage.py [create_db|sync]"


def main(argv=None, app_factory=create_app) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        print(f"No command provided. {USAGE}")
        return 1
    command = COMMANDS.get(argv[0])
    if command is None:
        print(f"Unknown command: {argv[0]}")
        print(USAGE)
        return 1

    app = app_factory()
    try:
        return command(app)
    except TuneVaultError as exc:
        print(f"Error: {exc.message}")
        return 2
    finally:
        shutdown(app)


if __name__ == '__main__':
    sys.exit(main())
