"""Station reconciliation from `Docked` (and docked `Location` /
`CarrierJump`) events.
"""

from ebgs.eddn.envelope import MalformedMessage
from ebgs.reconcile import (apply, canonical, changed, event_time, faction_ref,
        is_stale, latest_snapshot, lower)
import ebgs.db.schema as sch

import sqlalchemy as sa


def station_fields(message):
    name, state = faction_ref(message.get('StationFaction'), message)
    economies = [{'name': lower(e.get('Name')), 'proportion': e.get('Proportion')}
            for e in message.get('StationEconomies') or []]
    return {
            'type': lower(message.get('StationType')),
            'government': lower(message.get('StationGovernment')),
            'allegiance': lower(message.get('StationAllegiance')),
            'economy': lower(message.get('StationEconomy')),
            'state': lower(state),
            'controlling_minor_faction': name,
            'services': canonical([lower(s) for s in
                message.get('StationServices') or []]),
            'economies': economies,
    }


def find_station(sess, name_lower, system_lower, market_id=None):
    """By `market_id` first. The name + system fallback never matches a
    station already holding another `market_id`.
    """
    if market_id is not None:
        r = sess.execute(sa.select(sch.Station).where(
                sch.Station.market_id == market_id)).scalar()
        if r is not None:
            return r
    stmt = sa.select(sch.Station).where(
            (sch.Station.name_lower == name_lower)
            & (sch.Station.system_lower == system_lower))
    if market_id is not None:
        stmt = stmt.where(sch.Station.market_id.is_(None))
    return sess.execute(stmt.order_by(sch.Station.id)).scalars().first()


def reconcile_station(sess, message, header):
    """Upserts the station the commander docked at. Returns the number of
    history rows written (0 or 1).
    """
    name = message.get('StationName')
    system_name = message.get('StarSystem')
    if not name or not system_name:
        raise MalformedMessage('Station event without StationName / StarSystem')
    ts = event_time(header, message)
    updated_by = header.get('softwareName')
    name_lower = name.lower()
    system_lower = system_name.lower()
    market_id = message.get('MarketID')

    fields = station_fields(message)
    attrs = {
            'economies': fields['economies'],
            'distance_from_star': message.get('DistFromStarLS'),
    }

    station = find_station(sess, name_lower, system_lower, market_id)
    prev = None
    if station is None:
        station = sch.Station(market_id=market_id, attrs=attrs)
        sess.add(station)
    elif is_stale(station, ts):
        return 0
    else:
        prev = latest_snapshot(sess, sch.StationHistory,
                sch.StationHistory.station_id == station.id)
        station.attrs.update(attrs)
        if station.market_id is None:
            station.market_id = market_id

    # Carriers move and stations get renamed; follow the feed
    station.name = name
    station.name_lower = name_lower
    station.system = system_name
    station.system_lower = system_lower
    apply(station, fields, skip=('economies',))
    station.updated_at = ts
    station.updated_by = updated_by

    if not changed(prev, fields, sch.StationHistory.RELEVANT):
        return 0
    sess.add(sch.StationHistory(station=station, station_name_lower=name_lower,
            updated_at=ts, updated_by=updated_by, **fields))
    return 1
