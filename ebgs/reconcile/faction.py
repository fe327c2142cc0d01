"""Faction reconciliation from the `Factions` block of system events.

Change detection is per presence: one event updates every faction present in
one system, and each (faction, system) pair gets its own history row only if
its influence, states or happiness moved. A presence missing from an event is
left as it was.

.. mermaid::

    flowchart LR
    faction[faction<br/><div style='text-align:left'>+government<br/>+allegiance</div>]
    faction --> faction_presence[faction_presence<br/><div style='text-align:left'>+influence<br/>+states<br/>+happiness</div>]
    faction_presence -- change --> faction_history
"""

from ebgs.eddn.envelope import MalformedMessage
from ebgs.reconcile import (apply, changed, event_time, is_stale,
        latest_snapshot, lower)
import ebgs.db.schema as sch

import sqlalchemy as sa


def _states(entries, trend):
    r = []
    for s in entries or []:
        o = {'state': lower(s['State'])}
        if trend:
            o['trend'] = s.get('Trend', 0)
        r.append(o)
    return r


def presence_fields(entry):
    """The relevant fields of one entry of an event's `Factions` list.
    """
    influence = entry.get('Influence')
    return {
            'state': lower(entry.get('FactionState')),
            'influence': float(influence) if influence is not None else None,
            'happiness': lower(entry.get('Happiness')),
            'active_states': _states(entry.get('ActiveStates'), trend=False),
            'pending_states': _states(entry.get('PendingStates'), trend=True),
            'recovering_states': _states(entry.get('RecoveringStates'), trend=True),
    }


def reconcile_factions(sess, message, header):
    """Reconciles every faction listed in a system event. Returns the number of
    history rows written.
    """
    system_name = message.get('StarSystem')
    if not system_name:
        raise MalformedMessage('Faction event without StarSystem')
    ts = event_time(header, message)
    updated_by = header.get('softwareName')

    written = 0
    for entry in message.get('Factions') or []:
        written += reconcile_faction(sess, entry, system_name, ts, updated_by)
    return written


def reconcile_faction(sess, entry, system_name, ts, updated_by=None):
    """Reconciles one faction's presence in `system_name` at time `ts`.
    Returns 1 if a history row was written, else 0.
    """
    name = entry.get('Name')
    if not name:
        raise MalformedMessage(f'Faction entry without Name in {system_name}')
    name_lower = name.lower()
    system_lower = system_name.lower()
    fields = presence_fields(entry)

    faction = sess.execute(sa.select(sch.Faction).where(
            sch.Faction.name_lower == name_lower)).scalar()
    if faction is None:
        faction = sch.Faction(name=name, name_lower=name_lower)
        sess.add(faction)
    elif is_stale(faction, ts):
        return 0

    if entry.get('Government'):
        faction.government = lower(entry['Government'])
    if entry.get('Allegiance'):
        faction.allegiance = lower(entry['Allegiance'])
    faction.updated_at = ts
    faction.updated_by = updated_by

    presence = faction.presence_in(system_lower)
    if presence is None:
        presence = sch.FactionPresence(system_name=system_name,
                system_name_lower=system_lower)
        faction.presence.append(presence)
    apply(presence, fields)
    presence.updated_at = ts

    prev = None
    if faction.id is not None:
        prev = latest_snapshot(sess, sch.FactionHistory,
                sch.FactionHistory.faction_id == faction.id,
                sch.FactionHistory.system_lower == system_lower)
    if not changed(prev, fields, sch.FactionHistory.RELEVANT):
        return 0
    sess.add(sch.FactionHistory(faction=faction, faction_name=name,
            faction_name_lower=name_lower, system=system_name,
            system_lower=system_lower, updated_at=ts, updated_by=updated_by,
            **fields))
    return 1
