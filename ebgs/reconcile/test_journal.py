
from ebgs.eddn.envelope import Envelope, MalformedMessage
from ebgs.reconcile.journal import JOURNAL_SCHEMAS, handle_journal
from ebgs.testing import faction_entry, fsd_jump
import ebgs.db.schema as sch

import pytest

def test_fsd_jump_touches_system_and_factions(session_factory, count_rows):
    env = fsd_jump('Alpha', 0,
            factions=[faction_entry('A'), faction_entry('B')])
    assert handle_journal(env, session_factory=session_factory) == 3
    assert count_rows(sch.System) == 1
    assert count_rows(sch.Faction) == 2
    assert count_rows(sch.Station) == 0


def test_other_events_ignored(session_factory, count_rows):
    env = Envelope(JOURNAL_SCHEMAS[1], {'gatewayTimestamp': '2026-01-01T00:00:00Z'},
            {'event': 'Scan', 'StarSystem': 'Alpha', 'BodyName': 'Alpha 1'})
    assert handle_journal(env, session_factory=session_factory) == 0
    assert count_rows(sch.System) == 0


def test_malformed_payload_writes_nothing(session_factory, count_rows):
    env = fsd_jump('Alpha', 0, factions=[faction_entry('A'), {'Influence': 0.1}])
    with pytest.raises(MalformedMessage):
        handle_journal(env, session_factory=session_factory)
    assert count_rows(sch.System) == 0
    assert count_rows(sch.Faction) == 0
    assert count_rows(sch.SystemHistory) == 0


def test_bad_state_entry_is_malformed(session_factory, count_rows):
    entry = faction_entry('A')
    entry['ActiveStates'] = [{'Name': 'Boom'}]
    with pytest.raises(MalformedMessage):
        handle_journal(fsd_jump('Alpha', 0, factions=[entry]),
                session_factory=session_factory)
    assert count_rows(sch.Faction) == 0


def test_bad_value_is_malformed(session_factory, count_rows):
    env = fsd_jump('Alpha', 0,
            factions=[faction_entry('Red Party', influence='n/a')])
    with pytest.raises(MalformedMessage):
        handle_journal(env, session_factory=session_factory)
    assert count_rows(sch.System) == 0
