
from ebgs.query import LatestN, history_mode
from ebgs.query.factions import FactionFilter, get_factions
from ebgs.query.stations import StationFilter, get_stations
from ebgs.query.systems import SystemFilter, get_systems
from ebgs.reconcile.journal import handle_journal
from ebgs.testing import docked, faction_entry, fsd_jump, naive

import pytest

T = 1767225600000  # 2026-01-01T00:00:00Z
MINUTE = 60000

@pytest.fixture
def galaxy(session_factory):
    """Red Party in Alpha and Beta; Blue Party in Alpha only. Red's influence
    changes on every sighting.
    """
    sightings = [('Alpha', 0, 0.30), ('Beta', 5, 0.60), ('Alpha', 10, 0.32),
            ('Beta', 15, 0.58), ('Alpha', 20, 0.34)]
    for system, minutes, inf in sightings:
        factions = [faction_entry('Red Party', influence=inf)]
        if system == 'Alpha':
            factions.append(faction_entry('Blue Party', influence=1 - inf,
                    active=['Boom']))
        handle_journal(fsd_jump(system, minutes, factions=factions),
                session_factory=session_factory)
    return session_factory


def _red(r):
    [doc] = [d for d in r['docs'] if d['name'] == 'Red Party']
    return doc


def test_presence_resolves_every_system(galaxy):
    r = get_factions(FactionFilter(system=['alpha']), session_factory=galaxy)
    assert [d['name'] for d in r['docs']] == ['Blue Party', 'Red Party']
    assert r['total'] == 2

    presence = _red(r)['faction_presence']
    assert [p['system_name'] for p in presence] == ['Alpha', 'Beta']
    assert all(p['system_id'] is not None for p in presence)
    assert len({p['system_id'] for p in presence}) == 2
    assert 'system_details' not in presence[0]
    assert presence[0]['influence'] == 0.34
    assert presence[1]['updated_at'] == naive(15).isoformat()


def test_system_details(galaxy):
    r = get_factions(FactionFilter(name=['Red Party']), system_details=True,
            session_factory=galaxy)
    [alpha, beta] = _red(r)['faction_presence']
    assert alpha['system_details']['name'] == 'Alpha'
    assert alpha['system_details']['id'] == alpha['system_id']
    assert beta['system_details']['population'] == 1000000


def test_minimal_omits_presence(galaxy):
    r = get_factions(FactionFilter(begins_with='red'), minimal=True,
            session_factory=galaxy)
    [doc] = r['docs']
    assert 'faction_presence' not in doc
    assert 'history' not in doc


def test_state_filter(galaxy):
    r = get_factions(FactionFilter(active_state=['boom']),
            session_factory=galaxy)
    assert [d['name'] for d in r['docs']] == ['Blue Party']
    r = get_factions(FactionFilter(pending_state=['boom']),
            session_factory=galaxy)
    assert r['docs'] == []


def test_latest_n_per_presence(galaxy):
    r = get_factions(FactionFilter(name=['Red Party']), LatestN(2),
            session_factory=galaxy, max_workers=2)
    history = _red(r)['history']
    assert [(h['system'], h['influence']) for h in history] == [
            ('Alpha', 0.34), ('Beta', 0.58), ('Alpha', 0.32), ('Beta', 0.60)]
    assert 'faction_id' not in history[0]

    r = get_factions(FactionFilter(name=['Red Party']), LatestN(1),
            session_factory=galaxy)
    assert [h['system'] for h in _red(r)['history']] == ['Alpha', 'Beta']


def test_time_window_is_inclusive(galaxy):
    mode = history_mode(timemin=T + 5 * MINUTE, timemax=T + 15 * MINUTE)
    r = get_factions(FactionFilter(name=['Red Party']), mode,
            session_factory=galaxy)
    assert [h['updated_at'] for h in _red(r)['history']] == [
            naive(m).isoformat() for m in (15, 10, 5)]


def test_filter_system_in_history(galaxy):
    flt = FactionFilter(name=['Red Party'], system=['BETA'])
    r = get_factions(flt, LatestN(5), session_factory=galaxy)
    assert {h['system'] for h in _red(r)['history']} == {'Alpha', 'Beta'}

    r = get_factions(flt, LatestN(5), filter_system_in_history=True,
            session_factory=galaxy)
    assert [h['influence'] for h in _red(r)['history']] == [0.58, 0.60]


def test_systems_minimal_and_history(galaxy):
    r = get_systems(SystemFilter(faction=['Blue Party']), minimal=True,
            session_factory=galaxy)
    [doc] = r['docs']
    assert doc['name'] == 'Alpha'
    assert 'factions' not in doc
    assert 'attrs' not in doc

    # Faction influence is not tracked on the system
    r = get_systems(SystemFilter(name=['alpha']), LatestN(10),
            session_factory=galaxy)
    [doc] = r['docs']
    assert len(doc['history']) == 1

    handle_journal(fsd_jump('Alpha', 30, Population=7), session_factory=galaxy)
    r = get_systems(SystemFilter(name=['alpha']), LatestN(10),
            session_factory=galaxy)
    [doc] = r['docs']
    assert [h['population'] for h in doc['history']] == [7, 1000000]
    assert doc['history'][0]['updated_at'] == naive(30).isoformat()
    assert 'system_id' not in doc['history'][0]


def test_station_history(session_factory):
    for minutes, state in [(0, 'None'), (10, 'Boom'), (20, 'Boom')]:
        handle_journal(docked('Ray Gateway', 'Alpha', minutes,
                StationFaction={'Name': 'Alpha Party', 'FactionState': state}),
                session_factory=session_factory)
    r = get_stations(StationFilter(system=['ALPHA']), LatestN(5),
            session_factory=session_factory)
    [doc] = r['docs']
    assert doc['state'] == 'boom'
    assert doc['updated_at'] == naive(20).isoformat()
    assert [h['state'] for h in doc['history']] == ['boom', 'none']

    r = get_stations(StationFilter(controlling_faction=['alpha party']),
            history_mode(timemax=T + 5 * MINUTE),
            session_factory=session_factory)
    assert [h['state'] for h in r['docs'][0]['history']] == ['none']


def test_non_ascii_faction_filter(session_factory):
    handle_journal(fsd_jump('Ōmikron', 0,
            factions=[faction_entry('Ōkami Clan', active=['Élection'])]),
            session_factory=session_factory)
    r = get_systems(SystemFilter(faction=['ŌKAMI CLAN']),
            session_factory=session_factory)
    assert [d['name'] for d in r['docs']] == ['Ōmikron']
    r = get_factions(FactionFilter(active_state=['élection']),
            session_factory=session_factory)
    assert [d['name'] for d in r['docs']] == ['Ōkami Clan']
