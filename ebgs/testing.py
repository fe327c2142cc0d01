"""Builders for journal envelopes, shared by the test modules.
"""

from ebgs.eddn.envelope import Envelope
from ebgs.reconcile.journal import JOURNAL_SCHEMAS

import arrow
import zlib

T0 = arrow.get('2026-01-01T00:00:00Z')


def ts(minutes):
    """ISO timestamp `minutes` after `T0`.
    """
    return T0.shift(minutes=minutes).isoformat()


def naive(minutes):
    """The naive UTC datetime the store holds for `ts(minutes)`.
    """
    return T0.shift(minutes=minutes).datetime.replace(tzinfo=None)


def faction_entry(name, influence=0.5, state='None', active=(), pending=(),
        recovering=(), happiness='$Faction_HappinessBand2;',
        government='$government_Democracy;', allegiance='Federation'):
    return {
            'Name': name,
            'FactionState': state,
            'Government': government,
            'Influence': influence,
            'Allegiance': allegiance,
            'Happiness': happiness,
            'ActiveStates': [{'State': s} for s in active],
            'PendingStates': [{'State': s, 'Trend': 0} for s in pending],
            'RecoveringStates': [{'State': s, 'Trend': 0} for s in recovering],
    }


def header(minutes):
    return {
            'uploaderID': 'Cmdr Test',
            'softwareName': 'E:D Market Connector',
            'softwareVersion': '5.0.0',
            'gatewayTimestamp': ts(minutes),
    }


def fsd_jump(system, minutes, factions=None, event='FSDJump', **extra):
    """Journal envelope for arriving in `system`, `minutes` after `T0`.
    """
    if factions is None:
        factions = [faction_entry(f'{system} Party')]
    controlling = factions[0]['Name'] if factions else None
    message = {
            'event': event,
            'timestamp': ts(minutes),
            'StarSystem': system,
            'SystemAddress': zlib.crc32(system.lower().encode()),
            'StarPos': [0.0, 0.0, 0.0],
            'SystemAllegiance': 'Federation',
            'SystemEconomy': '$economy_Industrial;',
            'SystemSecondEconomy': '$economy_Refinery;',
            'SystemGovernment': '$government_Democracy;',
            'SystemSecurity': '$SYSTEM_SECURITY_high;',
            'Population': 1000000,
            'SystemFaction': {'Name': controlling, 'FactionState': 'None'},
            'Factions': factions,
    }
    message.update(extra)
    return Envelope(JOURNAL_SCHEMAS[0], header(minutes), message)


def docked(station, system, minutes, market_id=None, **extra):
    message = {
            'event': 'Docked',
            'timestamp': ts(minutes),
            'StarSystem': system,
            'SystemAddress': zlib.crc32(system.lower().encode()),
            'StationName': station,
            'StationType': 'Coriolis',
            'MarketID': market_id,
            'StationFaction': {'Name': f'{system} Party', 'FactionState': 'None'},
            'StationGovernment': '$government_Democracy;',
            'StationAllegiance': 'Federation',
            'StationEconomy': '$economy_Industrial;',
            'StationEconomies': [{'Name': '$economy_Industrial;',
                'Proportion': 1.0}],
            'StationServices': ['dock', 'commodities', 'refuel'],
            'DistFromStarLS': 512.3,
    }
    message.update(extra)
    return Envelope(JOURNAL_SCHEMAS[0], header(minutes), message)
