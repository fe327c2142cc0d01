"""Long-running EDDN subscriber.

Messages are handled strictly one at a time, in arrival order: decode,
dispatch, reconcile (including the commit) before the next `recv`. The only
state shared with the watchdog thread is the last-message timestamp, which the
watchdog guards itself, and the reconnect request flag.
"""

from ebgs.config import get_config
from ebgs.eddn.dispatch import default_dispatcher
from ebgs.eddn.envelope import MalformedMessage, decode
from ebgs.eddn.watchdog import Watchdog

import sqlalchemy as sa
import sys
import threading
import zmq

# Milliseconds to block in `poll` before looking at the reconnect flag again
_POLL_MS = 1000


class FeedListener:
    def __init__(self, dispatcher=None, *, relay=None, watchdog=None,
            context=None):
        self.dispatcher = dispatcher or default_dispatcher()
        self.relay = relay or get_config()['eddn']['relay']
        self.watchdog = watchdog or Watchdog(self.request_reconnect)
        self.context = context or zmq.Context.instance()

        self._socket = None
        self._reconnect = threading.Event()
        self._stop = threading.Event()
        self.reconnects = 0


    def connect(self):
        self._socket = self.context.socket(zmq.SUB)
        self._socket.setsockopt(zmq.SUBSCRIBE, b'')
        self._socket.connect(self.relay)
        print(f'Connected to EDDN relay at {self.relay}')


    def disconnect(self):
        if self._socket is not None:
            self._socket.close(linger=0)
            self._socket = None


    def request_reconnect(self):
        """Thread-safe; the ingestion loop performs the actual reconnect.
        """
        self._reconnect.set()


    def reconnect(self):
        print('Reconnecting to EDDN')
        self.disconnect()
        self.connect()
        self.reconnects += 1


    def stop(self):
        self._stop.set()


    def handle(self, raw):
        """Decodes and dispatches one frame. Returns the handler's result, or
        None if the frame was dropped.
        """
        try:
            envelope = decode(raw)
            return self.dispatcher.dispatch(envelope)
        except MalformedMessage:
            return None
        except sa.exc.SQLAlchemyError as e:
            # Session already rolled back; this message is lost.
            print(f'Store error, message dropped: {e}', file=sys.stderr)
            return None


    def run(self):
        """Runs until `stop()` is called (or forever).
        """
        self.connect()
        self.watchdog.touch()
        self.watchdog.start()
        try:
            while not self._stop.is_set():
                if self._reconnect.is_set():
                    self._reconnect.clear()
                    self.reconnect()
                if self._socket.poll(_POLL_MS, zmq.POLLIN):
                    raw = self._socket.recv()
                    self.watchdog.touch()
                    self.handle(raw)
        finally:
            self.watchdog.stop()
            self.disconnect()
