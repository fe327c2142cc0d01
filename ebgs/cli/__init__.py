"""Main command line interface for EBGS.

This tool consists of many sub-commands; see below modules (or commandline
`--help`) for more information.
"""

import typer

app = typer.Typer()

from .alembic import main as alembic_cmd
app.command('alembic')(alembic_cmd)

from .db import app as db_app
app.add_typer(db_app, name='db')

from .ingest import app as ingest_app
app.add_typer(ingest_app, name='ingest')

from .query import app as query_app
app.add_typer(query_app, name='query')


@app.command()
def listen():
    """Subscribes to EDDN and reconciles every journal message until killed.
    """
    from ebgs.eddn.listener import FeedListener
    FeedListener().run()


@app.command()
def shell():
    """Opens a shell with DB access.

    `sess()` is a function that returns a usable SQLAlchemy session. This is a
    function s.t. errors in the transaction won't invalidate future usages of
    sess, which can be annoying when testing in a REPL.
    """
    from ebgs.db.connection import get_session
    import ebgs.db.schema as sch
    import sqlalchemy as sa

    sess = lambda: get_session().__enter__()

    print(f'Use `sess()` for a session / schema module as `sch` / sqlalchemy as `sa`')
    print(f'...Try something like `sess().execute(sa.select(sch.Faction).limit(1)).scalar()`')

    import IPython; IPython.embed()
