"""System queries.
"""

from ebgs.db.connection import get_session
from ebgs.query import (EntityFilter, check_request, encode, fan_out,
        fetch_history, paginate)
import ebgs.db.schema as sch

import dataclasses
from typing import List, Optional


@dataclasses.dataclass
class SystemFilter(EntityFilter):
    id: Optional[List[int]] = None
    eddb_id: Optional[List[int]] = None
    system_address: Optional[List[int]] = None
    name: Optional[List[str]] = None
    begins_with: Optional[str] = None
    allegiance: Optional[List[str]] = None
    government: Optional[List[str]] = None
    state: Optional[List[str]] = None
    primary_economy: Optional[List[str]] = None
    security: Optional[List[str]] = None
    # Any faction present in the system
    faction: Optional[List[str]] = None
    controlling_faction: Optional[List[str]] = None

    def _clauses(self):
        S = sch.System
        yield self.eq(S.id, self.id, cast=int)
        yield self.eq(S.eddb_id, self.eddb_id, cast=int)
        yield self.eq(S.system_address, self.system_address, cast=int)
        yield self.eq(S.name_lower, self.name)
        yield self.prefix(S.name_lower, self.begins_with)
        yield self.eq(S.allegiance, self.allegiance)
        yield self.eq(S.government, self.government)
        yield self.eq(S.state, self.state)
        yield self.eq(S.primary_economy, self.primary_economy)
        yield self.eq(S.security, self.security)
        yield self.json_has(S.factions, self.faction)
        yield self.eq(S.controlling_minor_faction_lower, self.controlling_faction)


# Left out of minimal documents
_BULKY = ('factions', 'attrs')


def get_systems(flt, history=None, *, page=1, minimal=False,
        session_factory=get_session, limit=None, max_workers=None):
    """Returns one page of systems matching `flt`, each with a `history` list
    if `history` is given.
    """
    check_request(flt, history, minimal)

    with session_factory() as sess:
        systems, meta = paginate(sess, sch.System, flt.predicates(), page,
                limit)
        docs = [encode(s, drop=_BULKY if minimal else ()) for s in systems]

    if history is not None:
        H = sch.SystemHistory
        def one(doc):
            return fetch_history(session_factory, H, [H.system_id == doc['id']],
                    history)
        for doc, h in zip(docs, fan_out(one, docs, max_workers)):
            doc['history'] = h

    return {'docs': docs, **meta}
