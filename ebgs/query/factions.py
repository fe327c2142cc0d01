"""Faction queries.

Each returned faction's presence entries are decorated with the id (and, on
request, the full document) of the system they name. The presence rows and
their systems come back from one joined statement per page, whatever the
outer filter matched.
"""

from ebgs.db.connection import get_session
from ebgs.query import (EntityFilter, check_request, encode, fan_out,
        fetch_history, paginate)
import ebgs.db.schema as sch

import collections
import dataclasses
import sqlalchemy as sa
from typing import List, Optional


@dataclasses.dataclass
class FactionFilter(EntityFilter):
    id: Optional[List[int]] = None
    eddb_id: Optional[List[int]] = None
    name: Optional[List[str]] = None
    begins_with: Optional[str] = None
    allegiance: Optional[List[str]] = None
    government: Optional[List[str]] = None
    # Systems the faction is present in
    system: Optional[List[str]] = None
    active_state: Optional[List[str]] = None
    pending_state: Optional[List[str]] = None
    recovering_state: Optional[List[str]] = None

    def _clauses(self):
        F = sch.Faction
        P = sch.FactionPresence
        yield self.eq(F.id, self.id, cast=int)
        yield self.eq(F.eddb_id, self.eddb_id, cast=int)
        yield self.eq(F.name_lower, self.name)
        yield self.prefix(F.name_lower, self.begins_with)
        yield self.eq(F.allegiance, self.allegiance)
        yield self.eq(F.government, self.government)
        if self.system is not None:
            yield F.presence.any(self.eq(P.system_name_lower, self.system))
        for col, values in [
                (P.active_states, self.active_state),
                (P.pending_states, self.pending_state),
                (P.recovering_states, self.recovering_state)]:
            if values is not None:
                yield F.presence.any(self.json_has(col, values))

    def system_names(self):
        if self.system is None:
            return None
        if isinstance(self.system, str):
            return [self.system.lower()]
        return [s.lower() for s in self.system]


def _presence_with_systems(sess, faction_ids):
    """{faction_id: [(FactionPresence, System or None)]}, system matched on
    lower-cased name.
    """
    P = sch.FactionPresence
    S = sch.System
    rows = sess.execute(
            sa.select(P, S)
            .outerjoin(S, S.name_lower == P.system_name_lower)
            .where(P.faction_id.in_(faction_ids))
            .order_by(P.faction_id, P.system_name_lower)
            ).all()
    r = collections.defaultdict(list)
    for p, s in rows:
        r[p.faction_id].append((p, s))
    return r


def _encode_presence(presence, system, system_details):
    d = encode(presence, drop=('id', 'faction_id'))
    d['system_id'] = system.id if system is not None else None
    if system_details:
        d['system_details'] = encode(system)
    return d


def get_factions(flt, history=None, *, page=1, minimal=False,
        filter_system_in_history=False, system_details=False,
        session_factory=get_session, limit=None, max_workers=None):
    """Returns one page of factions matching `flt`.

    Args:
        history: `TimeWindow`, `LatestN` or None. `LatestN` applies per
                presence (faction, system) pair.
        minimal: Omit `faction_presence`. Refused together with history.
        filter_system_in_history: If `flt.system` is set, only return history
                for those systems. Otherwise history covers every system the
                faction is present in.
        system_details: Attach the full system document to each presence.
    """
    check_request(flt, history, minimal)

    with session_factory() as sess:
        factions, meta = paginate(sess, sch.Faction, flt.predicates(), page,
                limit)
        docs = [encode(f) for f in factions]
        if not minimal:
            presence = _presence_with_systems(sess, [f.id for f in factions])
            for doc in docs:
                doc['faction_presence'] = [
                        _encode_presence(p, s, system_details)
                        for p, s in presence[doc['id']]]

    if history is not None:
        systems = flt.system_names() if filter_system_in_history else None
        H = sch.FactionHistory
        def one(doc):
            names = systems or [p['system_name_lower']
                    for p in doc['faction_presence']]
            return fetch_history(session_factory, H,
                    [H.faction_id == doc['id'], H.system_lower.in_(names)],
                    history, partition_by=H.system_lower)
        for doc, h in zip(docs, fan_out(one, docs, max_workers)):
            doc['history'] = h

    return {'docs': docs, **meta}
