"""Station queries.
"""

from ebgs.db.connection import get_session
from ebgs.query import (EntityFilter, check_request, encode, fan_out,
        fetch_history, paginate)
import ebgs.db.schema as sch

import dataclasses
from typing import List, Optional


@dataclasses.dataclass
class StationFilter(EntityFilter):
    id: Optional[List[int]] = None
    eddb_id: Optional[List[int]] = None
    market_id: Optional[List[int]] = None
    name: Optional[List[str]] = None
    begins_with: Optional[str] = None
    type: Optional[List[str]] = None
    system: Optional[List[str]] = None
    economy: Optional[List[str]] = None
    allegiance: Optional[List[str]] = None
    government: Optional[List[str]] = None
    state: Optional[List[str]] = None
    controlling_faction: Optional[List[str]] = None

    def _clauses(self):
        S = sch.Station
        yield self.eq(S.id, self.id, cast=int)
        yield self.eq(S.eddb_id, self.eddb_id, cast=int)
        yield self.eq(S.market_id, self.market_id, cast=int)
        yield self.eq(S.name_lower, self.name)
        yield self.prefix(S.name_lower, self.begins_with)
        yield self.eq(S.type, self.type)
        yield self.eq(S.system_lower, self.system)
        yield self.eq(S.economy, self.economy)
        yield self.eq(S.allegiance, self.allegiance)
        yield self.eq(S.government, self.government)
        yield self.eq(S.state, self.state)
        yield self.eq(S.controlling_minor_faction_lower, self.controlling_faction)


def get_stations(flt, history=None, *, page=1, session_factory=get_session,
        limit=None, max_workers=None):
    """Returns one page of stations matching `flt`, each with a `history` list
    if `history` is given. History is fetched per station in parallel; if any
    fetch fails, so does the page.
    """
    check_request(flt, history, minimal=False)

    with session_factory() as sess:
        stations, meta = paginate(sess, sch.Station, flt.predicates(), page,
                limit)
        docs = [encode(s) for s in stations]

    if history is not None:
        H = sch.StationHistory
        def one(doc):
            return fetch_history(session_factory, H,
                    [H.station_id == doc['id']], history)
        for doc, h in zip(docs, fan_out(one, docs, max_workers)):
            doc['history'] = h

    return {'docs': docs, **meta}
