"""System reconciliation from `FSDJump` / `Location` / `CarrierJump`.

.. mermaid::

    flowchart LR
    system[system<br/><div style='text-align:left'>+government<br/>+allegiance<br/>+security<br/>+factions</div>]
    system -- change --> system_history
"""

from ebgs.eddn.envelope import MalformedMessage
from ebgs.reconcile import (apply, canonical, changed, event_time, faction_ref,
        is_stale, latest_snapshot, lower)
import ebgs.db.schema as sch

import sqlalchemy as sa


def system_fields(message):
    """The relevant (history-tracked) fields of a system event.
    """
    name, state = faction_ref(message.get('SystemFaction'), message)
    factions = [{'name': f['Name'], 'name_lower': f['Name'].lower()}
            for f in message.get('Factions') or []]
    return {
            'government': lower(message.get('SystemGovernment')),
            'allegiance': lower(message.get('SystemAllegiance')),
            'state': lower(state),
            'security': lower(message.get('SystemSecurity')),
            'population': message.get('Population'),
            'primary_economy': lower(message.get('SystemEconomy')),
            'secondary_economy': lower(message.get('SystemSecondEconomy')),
            'controlling_minor_faction': name,
            'factions': canonical(factions),
    }


def _conflicts(message):
    r = []
    for c in message.get('Conflicts') or []:
        r.append({
                'type': lower(c.get('WarType')),
                'status': lower(c.get('Status')),
                'factions': [
                    {
                        'name': side.get('Name'),
                        'name_lower': lower(side.get('Name')),
                        'stake': side.get('Stake'),
                        'days_won': side.get('WonDays'),
                    }
                    for side in [c.get('Faction1') or {}, c.get('Faction2') or {}]],
        })
    return r


def find_system(sess, name_lower, system_address=None):
    if system_address is not None:
        r = sess.execute(sa.select(sch.System).where(
                sch.System.system_address == system_address)).scalar()
        if r is not None:
            return r
    return sess.execute(sa.select(sch.System).where(
            sch.System.name_lower == name_lower)).scalar()


def reconcile_system(sess, message, header):
    """Upserts the system named by `message`. Returns the number of history rows
    written (0 or 1).
    """
    name = message.get('StarSystem')
    if not name:
        raise MalformedMessage('System event without StarSystem')
    ts = event_time(header, message)
    updated_by = header.get('softwareName')
    name_lower = name.lower()
    address = message.get('SystemAddress')

    fields = system_fields(message)
    attrs = {
            'star_pos': message.get('StarPos'),
            'conflicts': _conflicts(message),
    }

    system = find_system(sess, name_lower, address)
    prev = None
    if system is None:
        system = sch.System(name=name, name_lower=name_lower,
                system_address=address, attrs=attrs)
        sess.add(system)
    elif is_stale(system, ts):
        return 0
    else:
        prev = latest_snapshot(sess, sch.SystemHistory,
                sch.SystemHistory.system_id == system.id)
        system.attrs.update(attrs)
        if system.system_address is None:
            system.system_address = address

    apply(system, fields)
    system.updated_at = ts
    system.updated_by = updated_by

    if not changed(prev, fields, sch.SystemHistory.RELEVANT):
        return 0
    sess.add(sch.SystemHistory(system=system, system_name_lower=name_lower,
            updated_at=ts, updated_by=updated_by, **fields))
    return 1
