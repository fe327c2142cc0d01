
from ebgs.query import (LatestN, QueryError, TimeWindow, WINDOW_MS, fan_out,
        from_millis, history_mode, paginate, to_millis)
from ebgs.query.factions import FactionFilter, get_factions
from ebgs.query.stations import StationFilter, get_stations
from ebgs.query.systems import SystemFilter, get_systems
from ebgs.reconcile.journal import handle_journal
from ebgs.testing import fsd_jump
import ebgs.db.schema as sch

import pytest
import threading

T = 1767225600000  # 2026-01-01T00:00:00Z

def test_window_from_timemin():
    assert history_mode(timemin=T) == TimeWindow(from_millis(T),
            from_millis(T + WINDOW_MS))


def test_window_from_timemax():
    assert history_mode(timemax=T) == TimeWindow(from_millis(T - WINDOW_MS),
            from_millis(T))


def test_window_exact():
    m = history_mode(timemin=T - 5, timemax=T + 5)
    assert to_millis(m.greater) == T - 5
    assert to_millis(m.lesser) == T + 5


def test_count_wins():
    assert history_mode(timemin=T, timemax=T + 1, count=3) == LatestN(3)
    assert history_mode() is None
    for count in [0, -3, '0']:
        with pytest.raises(QueryError):
            history_mode(count=count)
        with pytest.raises(QueryError):
            history_mode(timemin=T, count=count)
    with pytest.raises(QueryError):
        history_mode(timemin=T + 1, timemax=T)


def test_millis_round_trip():
    assert from_millis(T).isoformat() == '2026-01-01T00:00:00'
    assert to_millis(from_millis(T + 123)) == T + 123


def _no_store():
    raise AssertionError('Store touched')


def test_empty_filter_rejected():
    for fn, flt in [(get_factions, FactionFilter()),
            (get_systems, SystemFilter()),
            (get_stations, StationFilter())]:
        with pytest.raises(QueryError) as exc:
            fn(flt, session_factory=_no_store)
        assert 'at least 1' in str(exc.value)


def test_minimal_with_history_rejected():
    for mode in [LatestN(2), history_mode(timemin=T)]:
        with pytest.raises(QueryError):
            get_factions(FactionFilter(name=['x']), mode, minimal=True,
                    session_factory=_no_store)
        with pytest.raises(QueryError):
            get_systems(SystemFilter(name=['x']), mode, minimal=True,
                    session_factory=_no_store)


def test_pagination(session_factory):
    for i in range(25):
        handle_journal(fsd_jump(f'Sys {i:02d}', 0, factions=[]),
                session_factory=session_factory)
    flt = SystemFilter(government=['$government_Democracy;'])

    with session_factory() as sess:
        items, meta = paginate(sess, sch.System, flt.predicates(), page=2,
                limit=10)
        names = [s.name for s in items]
    assert names == [f'Sys {i:02d}' for i in range(10, 20)]
    assert meta['total'] == 25
    assert meta['pages'] == 3
    assert meta['prev_page'] == 1 and meta['next_page'] == 3

    r = get_systems(flt, page=3, limit=10, session_factory=session_factory)
    assert [d['name'] for d in r['docs']] == [f'Sys {i}' for i in range(20, 25)]
    assert r['next_page'] is None

    with pytest.raises(QueryError):
        get_systems(flt, page=0, session_factory=session_factory)


def test_empty_result(session_factory):
    r = get_systems(SystemFilter(name=['nowhere']),
            session_factory=session_factory)
    assert r['docs'] == []
    assert r['total'] == 0
    assert r['pages'] == 1


def test_fan_out_order_and_bound():
    active = []
    peak = []
    lock = threading.Lock()
    def fn(i):
        with lock:
            active.append(i)
            peak.append(len(active))
        with lock:
            active.remove(i)
        return i * 2
    assert fan_out(fn, range(20), max_workers=3) == [i * 2 for i in range(20)]
    assert max(peak) <= 3
    assert fan_out(fn, []) == []


def test_fan_out_all_or_nothing():
    def fn(i):
        if i == 3:
            raise RuntimeError('sub-fetch failed')
        return i
    with pytest.raises(RuntimeError):
        fan_out(fn, range(6), max_workers=2)
