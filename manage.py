# manage.py
import sys

from app import create_app
from config import Config
from songlibrary.database.db_manager import db, run_init_script

USAGE = "Usage: python manage.py create_db | init_db [path/to/init.sql]"


def create_db():
    """Creates the database tables."""
    app = create_app()
    with app.app_context():
        db.create_all()
        print(f"Database tables created at {app.config['SQLALCHEMY_DATABASE_URI']}")


def init_db(path=None):
    """Runs a SQL bootstrap script (defaults to INIT_PATH)."""
    app = create_app({'INIT_PATH': None})
    script = path or Config.INIT_PATH
    if not script:
        print("No script given and INIT_PATH is not set.")
        sys.exit(1)
    with app.app_context():
        if run_init_script(script):
            print(f"Executed {script}")
        else:
            print(f"Nothing executed from {script}")
            sys.exit(1)


if __name__ == '__main__':
    if len(sys.argv) > 1:
        command = sys.argv[1]
        if command == 'create_db':
            create_db()
        elif command == 'init_db':
            init_db(sys.argv[2] if len(sys.argv) > 2 else None)
        else:
            print(f"Unknown command: {command}")
            print(USAGE)
    else:
        print(f"No command provided. {USAGE}")
