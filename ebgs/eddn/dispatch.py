"""Routes decoded envelopes to the handler registered for their schema.

The relay carries many schemas (commodities, outfitting, shipyards, ...) that
EBGS has no use for; those fall through to a no-op handler.
"""

from ebgs.reconcile.journal import JOURNAL_SCHEMAS, handle_journal

import functools


def _ignore(envelope):
    return None


class SchemaDispatcher:
    """Explicit mapping from schema URI to handler. Handlers take an
    `Envelope` and return whatever the caller wants to report (the journal
    handler returns the number of history rows written).
    """
    def __init__(self, default=_ignore):
        self._handlers = {}
        self._default = default

    def register(self, schema_refs, handler):
        """Registers `handler` for every URI in `schema_refs`; several versions
        of the same schema may alias one handler.
        """
        if isinstance(schema_refs, str):
            schema_refs = [schema_refs]
        for ref in schema_refs:
            assert ref not in self._handlers, f'{ref} registered twice'
            self._handlers[ref] = handler

    def handler_for(self, schema_ref):
        return self._handlers.get(schema_ref, self._default)

    def dispatch(self, envelope):
        return self.handler_for(envelope.schema_ref)(envelope)

    def schemas(self):
        return sorted(self._handlers)


def default_dispatcher(session_factory=None):
    """Dispatcher with every schema EBGS understands registered.
    """
    d = SchemaDispatcher()
    kwargs = {}
    if session_factory is not None:
        kwargs['session_factory'] = session_factory
    d.register(JOURNAL_SCHEMAS, functools.partial(handle_journal, **kwargs))
    return d
