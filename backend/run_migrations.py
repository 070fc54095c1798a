"""Create the study planner tables on the database named by DATABASE_URL."""
from study_planner.database import create_db_and_tables, engine


def run():
    """Create every missing table from the SQLModel metadata.

    Intended for bootstrapping a fresh database before the first start;
    the application does the same on import, so running it twice is
    harmless.
    """
    print("Using database:", engine.url.render_as_string(hide_password=True))
    create_db_and_tables()
    print("Tables ready.")


if __name__ == '__main__':
    run()
