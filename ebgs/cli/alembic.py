
import os
import subprocess
from typing import List

_path = os.path.dirname(os.path.abspath(__file__))
ALEMBIC_INI = os.path.normpath(os.path.join(_path, '../db/alembic/alembic.ini'))

def main(args: List[str]):
    """Runs the `alembic` command against EBGS's migrations and database.

    Usually ran as `./ebgs_cli.py alembic -- <args>`

    Most common commands:

        * upgrade head : Upgrade database to most recent revision.

        * revision --autogenerate -m <message> : Generate a new revision from
            the difference between `ebgs.db.schema` and the database. Check it
            by hand before committing.

        * downgrade -1 : Downgrade the database by one revision.

        * history : Show all revisions.
    """
    subprocess.check_call(['alembic', '--config', ALEMBIC_INI, *args])
