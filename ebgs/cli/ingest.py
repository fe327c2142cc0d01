"""Import EDDN traffic other than from the live relay.
"""

from pathlib import Path
import typer

app = typer.Typer()

@app.command()
def replay(path: Path=typer.Argument(..., exists=True, dir_okay=False)):
    """Reconciles a file of captured envelopes, one JSON envelope per line.
    """
    from ebgs.eddn.replay import replay_file
    stats = replay_file(path)
    print(f"Replayed {stats['messages']} messages ({stats['dropped']} dropped); "
            f"{stats['history_rows']} history rows written")


if __name__ == '__main__':
    app()
