
import ebgs.db.connection

import typer

app = typer.Typer()

def _upgrade():
    from .alembic import main as alembic_cmd
    alembic_cmd(['upgrade', 'head'])


@app.command()
def create():
    """Creates the database if it does not exist, then migrates it to the
    latest alembic revision.
    """
    from sqlalchemy_utils import database_exists, create_database

    engine = ebgs.db.connection.get_engine()
    if not database_exists(engine.url):
        print(f'Creating: {engine.url.render_as_string()}')
        create_database(engine.url)
    _upgrade()
    print('Schema up to date.')


@app.command()
def reset():
    """Deletes entire database and recreates it empty, at the latest alembic
    revision.
    """
    from sqlalchemy_utils import database_exists, drop_database, create_database

    engine = ebgs.db.connection.get_engine()
    if database_exists(engine.url):
        print(f'Considering reset of: {engine.url.render_as_string()}')
        sure = input('Are you sure? This will purge everything. (y/N) ')
        if sure.lower() != 'y':
            print('Aborting.')
            return

        print('Resetting.')
        # Pooled connections would keep the database busy
        engine.dispose()
        drop_database(engine.url)
    else:
        print('Creating.')

    create_database(engine.url)
    _upgrade()


if __name__ == '__main__':
    app()
