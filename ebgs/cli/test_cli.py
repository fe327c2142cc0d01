
from ebgs.cli import app

from typer.testing import CliRunner

runner = CliRunner()

def test_query_needs_a_filter():
    for entity in ['factions', 'systems', 'stations']:
        r = runner.invoke(app, ['query', entity])
        assert r.exit_code == 2, r.output


def test_query_minimal_with_history():
    r = runner.invoke(app, ['query', 'factions', '--name', 'Red Party',
            '--minimal', '--count', '2'])
    assert r.exit_code == 2, r.output


def test_help_lists_commands():
    r = runner.invoke(app, ['--help'])
    assert r.exit_code == 0
    for cmd in ['listen', 'ingest', 'query', 'db', 'shell']:
        assert cmd in r.output
