"""Reconciliation of journal events into current state and history.

Every reconciler follows the same steps for its unit (system, faction presence,
station):

1. Find the current document by its stable key; create it if unseen.
2. Drop the event if its timestamp is not strictly newer than the document's
   `updated_at` (duplicate, replayed or out-of-order delivery).
3. Otherwise update the document in place, and compare the relevant fields
   against the newest history snapshot. Only a difference (or no snapshot at
   all) appends a history row.

Because the comparison is against the last snapshot rather than the current
document, a crash between the document update and the history insert heals
itself on the next real change.
"""

from ebgs.eddn.envelope import MalformedMessage

import arrow
import json
import sqlalchemy as sa


def event_time(header, message):
    """Resolves the event timestamp as naive UTC; gateway time first.
    """
    for ts in [header.get('gatewayTimestamp'), message.get('timestamp')]:
        if ts is None:
            continue
        try:
            return arrow.get(ts).to('utc').datetime.replace(tzinfo=None)
        except (TypeError, ValueError, arrow.parser.ParserError):
            continue
    raise MalformedMessage(f'No usable timestamp in header {header}')


def lower(v):
    """Lower-cases strings; empty strings become None.
    """
    if isinstance(v, str):
        return v.lower() or None
    return v


def canonical(value):
    """Comparison form of a field value. Lists are treated as unordered.
    """
    if isinstance(value, dict):
        return {k: canonical(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        items = [canonical(v) for v in value]
        return sorted(items, key=lambda v: json.dumps(v, sort_keys=True))
    elif isinstance(value, float):
        return round(value, 6)
    return value


def changed(snapshot, fields, relevant):
    """True if `fields` differs from `snapshot` on any of `relevant`, or if
    there is no snapshot.
    """
    if snapshot is None:
        return True
    for k in relevant:
        if canonical(getattr(snapshot, k)) != canonical(fields.get(k)):
            return True
    return False


def latest_snapshot(sess, history_cls, *where):
    """Newest history row matching `where`, or None.
    """
    return sess.execute(
            sa.select(history_cls)
            .where(*where)
            .order_by(history_cls.updated_at.desc(), history_cls.id.desc())
            .limit(1)
            ).scalar()


def is_stale(doc, ts):
    return doc.updated_at is not None and ts <= doc.updated_at


def apply(doc, fields, skip=()):
    """Copies `fields` onto `doc`, keeping `*_lower` companions in sync.
    """
    for k, v in fields.items():
        if k in skip:
            continue
        setattr(doc, k, v)
        if hasattr(type(doc), f'{k}_lower'):
            setattr(doc, f'{k}_lower', lower(v))


def faction_ref(v, message, state_key='FactionState'):
    """Older journal versions sent the controlling faction as a bare string,
    with its state alongside; newer ones send `{Name, FactionState}`.

    Returns (name, state).
    """
    if isinstance(v, dict):
        return v.get('Name'), v.get('FactionState')
    return v, message.get(state_key)
