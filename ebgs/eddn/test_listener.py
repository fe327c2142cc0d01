
from ebgs.eddn.dispatch import SchemaDispatcher, default_dispatcher
from ebgs.eddn.listener import FeedListener
from ebgs.eddn.watchdog import Watchdog
from ebgs.testing import faction_entry, fsd_jump
import ebgs.db.schema as sch

import json
import sqlalchemy as sa
import zlib


def _frame(event):
    return zlib.compress(json.dumps({
            '$schemaRef': 'urn:journal',
            'header': {},
            'message': {'event': event},
    }).encode())


class FakeSocket:
    def __init__(self, ctx):
        self.ctx = ctx
        self.connected = []
        self.subscriptions = []
        self.closed = False
    def setsockopt(self, opt, value):
        self.subscriptions.append(value)
    def connect(self, addr):
        self.connected.append(addr)
    def poll(self, timeout, flags):
        if self.ctx.frames:
            return 1
        self.ctx.listener.stop()
        return 0
    def recv(self):
        return self.ctx.frames.pop(0)
    def close(self, linger=None):
        self.closed = True


class FakeContext:
    def __init__(self, frames):
        self.frames = list(frames)
        self.sockets = []
        self.listener = None
    def socket(self, kind):
        s = FakeSocket(self)
        self.sockets.append(s)
        return s


def _listener(frames, handler):
    d = SchemaDispatcher()
    d.register('urn:journal', handler)
    ctx = FakeContext(frames)
    listener = FeedListener(d, relay='tcp://relay.invalid:9500', context=ctx,
            watchdog=Watchdog(lambda: None, status_url='http://status.invalid',
                timeout=300, poll_interval=60))
    ctx.listener = listener
    return listener, ctx


def test_messages_handled_in_order():
    seen = []
    listener, ctx = _listener([_frame('FSDJump'), b'garbage', _frame('Docked')],
            lambda e: seen.append(e.message['event']))
    listener.run()

    assert seen == ['FSDJump', 'Docked']
    assert len(ctx.sockets) == 1
    s = ctx.sockets[0]
    assert s.connected == ['tcp://relay.invalid:9500']
    assert s.subscriptions == [b'']
    assert s.closed


def test_reconnect_request_resubscribes():
    listener, ctx = _listener([_frame('FSDJump')], lambda e: None)
    listener.request_reconnect()
    listener.run()

    assert listener.reconnects == 1
    assert len(ctx.sockets) == 2
    assert ctx.sockets[0].closed
    assert ctx.sockets[1].subscriptions == [b'']


def test_store_error_drops_message():
    def handler(e):
        raise sa.exc.OperationalError('INSERT', {}, Exception('db gone'))
    listener, ctx = _listener([], handler)
    assert listener.handle(_frame('FSDJump')) is None


def test_malformed_dropped():
    listener, ctx = _listener([], lambda e: 1)
    assert listener.handle(b'\x78\x9c not really') is None
    assert listener.handle(_frame('FSDJump')) == 1


def _journal_frame(env):
    return zlib.compress(json.dumps({'$schemaRef': env.schema_ref,
            'header': env.header, 'message': env.message}).encode())


def test_bad_payload_value_does_not_stop_ingestion(session_factory, count_rows):
    bad = fsd_jump('Alpha', 0,
            factions=[faction_entry('Red Party', influence='n/a')])
    good = fsd_jump('Beta', 10)

    listener, ctx = _listener([], None)
    listener.dispatcher = default_dispatcher(session_factory)
    assert listener.handle(_journal_frame(bad)) is None

    ctx.frames = [_journal_frame(bad), _journal_frame(good)]
    listener.run()
    assert count_rows(sch.System) == 1
    assert count_rows(sch.Faction, sch.Faction.name_lower == 'beta party') == 1
    assert count_rows(sch.Faction, sch.Faction.name_lower == 'red party') == 0
