"""Paginated, filterable views over current state, optionally with history.

Pieces shared by :mod:`.factions`, :mod:`.systems` and :mod:`.stations`:

* Filters are dataclasses of independently optional predicate slots;
  `predicates()` turns only the populated slots into SQLAlchemy clauses. A
  filter with no populated slot is refused, so nobody scans a whole table.
* History comes in two mutually exclusive modes, `TimeWindow` and `LatestN`;
  see :func:`history_mode`.
* Pages look like ``{docs, total, limit, page, pages, prev_page, next_page}``.
  The count runs against the same filter, without any history.
"""

from ebgs.config import get_config
from ebgs.db.connection import json_serializer

from concurrent.futures import ThreadPoolExecutor
import dataclasses
import datetime
import math
import sqlalchemy as sa

# Seven days in milliseconds; the span used when only one bound is given
WINDOW_MS = 604800000

_EPOCH = datetime.datetime(1970, 1, 1)


class QueryError(ValueError):
    """The caller asked for something this layer refuses to do. Reported back
    as a client error; never retried.
    """


@dataclasses.dataclass
class TimeWindow:
    '''All snapshots with `greater <= updated_at <= lesser`.'''
    greater: datetime.datetime
    lesser: datetime.datetime


@dataclasses.dataclass
class LatestN:
    '''The `count` most recent snapshots per entity (or per faction presence).'''
    count: int


def from_millis(ms):
    """Milliseconds since the epoch to naive UTC.
    """
    return _EPOCH + datetime.timedelta(milliseconds=int(ms))


def to_millis(dt):
    return int((dt - _EPOCH) / datetime.timedelta(milliseconds=1))


def history_mode(timemin=None, timemax=None, count=None):
    """Derives the history mode from request parameters (epoch milliseconds).

    `count` wins over any time bound. With only one bound, the other lies
    `WINDOW_MS` away from it. Returns None when no history was requested.
    """
    if count is not None:
        count = int(count)
        if count < 1:
            raise QueryError(f'count must be positive, not {count}')
        return LatestN(count)
    if timemin is None and timemax is None:
        return None
    if timemax is None:
        timemax = int(timemin) + WINDOW_MS
    elif timemin is None:
        timemin = int(timemax) - WINDOW_MS
    if int(timemin) > int(timemax):
        raise QueryError(f'timemin {timemin} is after timemax {timemax}')
    return TimeWindow(greater=from_millis(timemin), lesser=from_millis(timemax))


class EntityFilter:
    """Base for the typed filters. Subclasses are dataclasses whose fields
    default to None and implement `_clauses`.
    """
    def predicates(self):
        return [c for c in self._clauses() if c is not None]

    def _clauses(self):
        raise NotImplementedError

    @staticmethod
    def eq(col, values, cast=None):
        """`col IN values`, lower-casing strings unless `cast` is given.
        """
        if values is None:
            return None
        if isinstance(values, (str, int)):
            values = [values]
        if cast is None:
            cast = lambda v: v.lower() if isinstance(v, str) else v
        return col.in_([cast(v) for v in values])

    @staticmethod
    def prefix(col, value):
        if value is None:
            return None
        return col.startswith(value.lower(), autoescape=True)

    @staticmethod
    def json_has(col, values):
        """JSON column mentions any of the lower-cased string `values`.

        Works on the serialized text so the same clause runs on JSONB and on
        sqlite's JSON. Needs the engine's `json_serializer` from
        :mod:`ebgs.db.connection`, which keeps non-ASCII literal.
        """
        if values is None:
            return None
        if isinstance(values, str):
            values = [values]
        text = sa.cast(col, sa.Text)
        return sa.or_(*[text.contains(json_serializer(v.lower()),
                autoescape=True) for v in values])


def check_request(flt, history, minimal):
    """Contract checks done before touching the store.
    """
    if not flt.predicates():
        raise QueryError('Add at least 1 query parameter to limit traffic')
    if history is not None and minimal:
        raise QueryError('Minimal cannot work with History')


def paginate(sess, model, predicates, page, limit=None, options=()):
    """Runs one page of `select(model).where(*predicates)`, ordered by lower
    case name then id.

    Returns (items, meta) where meta carries the page bookkeeping.
    """
    if limit is None:
        limit = get_config()['query']['page_size']
    page = int(page)
    if page < 1:
        raise QueryError(f'page must be at least 1, not {page}')

    total = sess.execute(sa.select(sa.func.count())
            .select_from(model).where(*predicates)).scalar_one()
    items = sess.execute(
            sa.select(model)
            .where(*predicates)
            .options(*options)
            .order_by(model.name_lower, model.id)
            .limit(limit)
            .offset((page - 1) * limit)
            ).scalars().all()

    pages = math.ceil(total / limit) or 1
    meta = {
            'total': total,
            'limit': limit,
            'page': page,
            'pages': pages,
            'prev_page': page - 1 if page > 1 else None,
            'next_page': page + 1 if page < pages else None,
    }
    return items, meta


def history_rows(sess, history_cls, where, mode, partition_by=None):
    """History rows matching `where` under `mode`, newest first.

    For `LatestN` with `partition_by`, the limit applies per partition (per
    faction presence) rather than overall.
    """
    H = history_cls
    if isinstance(mode, TimeWindow):
        stmt = (sa.select(H)
                .where(*where, H.updated_at >= mode.greater,
                    H.updated_at <= mode.lesser))
    elif isinstance(mode, LatestN):
        if partition_by is None:
            stmt = (sa.select(H).where(*where)
                    .order_by(H.updated_at.desc(), H.id.desc())
                    .limit(mode.count))
        else:
            rn = sa.func.row_number().over(partition_by=partition_by,
                    order_by=(H.updated_at.desc(), H.id.desc())).label('rn')
            sub = sa.select(H.id, rn).where(*where).subquery()
            stmt = (sa.select(H)
                    .join(sub, sub.c.id == H.id)
                    .where(sub.c.rn <= mode.count))
    else:
        raise TypeError(mode)
    stmt = stmt.order_by(None).order_by(H.updated_at.desc(), H.id.desc())
    return sess.execute(stmt).scalars().all()


def fan_out(fn, items, max_workers=None):
    """Calls `fn` on every item with bounded parallelism, returning results in
    order. Any failure fails the whole call; queued work is cancelled.
    """
    items = list(items)
    if not items:
        return []
    if max_workers is None:
        max_workers = get_config()['query']['history_workers']
    workers = max(1, min(max_workers, len(items)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(fn, i) for i in items]
        try:
            return [f.result() for f in futures]
        except BaseException:
            for f in futures:
                f.cancel()
            raise


def encode(o, drop=()):
    """Encode an ORM object as a JSON-compatible dict.
    """
    if o is None:
        return None
    d = o.asdict()
    for k in drop:
        d.pop(k, None)
    return {k: v.isoformat() if isinstance(v, datetime.datetime) else v
            for k, v in d.items()}


def encode_history(rows, history_cls):
    return [encode(r, drop=history_cls.OWNER_FIELDS) for r in rows]


def fetch_history(session_factory, history_cls, where, mode, partition_by=None):
    """One history sub-fetch in its own session; safe to run from
    :func:`fan_out` workers.
    """
    with session_factory() as sess:
        rows = history_rows(sess, history_cls, where, mode,
                partition_by=partition_by)
        return encode_history(rows, history_cls)
