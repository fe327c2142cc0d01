"""Handler for the EDDN journal schema. Routes each journal event to the
reconcilers it carries data for.
"""

from ebgs.db.connection import get_session
from ebgs.eddn.envelope import MalformedMessage
from ebgs.reconcile.faction import reconcile_factions
from ebgs.reconcile.station import reconcile_station
from ebgs.reconcile.system import reconcile_system

# Live and test versions of the same schema
JOURNAL_SCHEMAS = [
        'https://eddn.edcd.io/schemas/journal/1',
        'https://eddn.edcd.io/schemas/journal/1/test',
]

SYSTEM_EVENTS = {'FSDJump', 'Location', 'CarrierJump'}
STATION_EVENTS = {'Docked'}


def handle_journal(envelope, session_factory=get_session):
    """Reconciles one journal envelope inside a single session. Returns the
    number of history rows written.

    Raises:
        MalformedMessage: The payload lacks something the reconcilers need.
                Nothing is written.
    """
    message = envelope.message
    event = message.get('event')
    has_system = event in SYSTEM_EVENTS
    has_station = (event in STATION_EVENTS
            or (has_system and message.get('Docked')
                and bool(message.get('StationName'))))
    if not has_system and not has_station:
        return 0

    written = 0
    try:
        with session_factory() as sess:
            if has_system:
                written += reconcile_system(sess, message, envelope.header)
                written += reconcile_factions(sess, message, envelope.header)
            if has_station:
                written += reconcile_station(sess, message, envelope.header)
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise MalformedMessage(f'Bad {event} payload: {e!r}')
    return written
