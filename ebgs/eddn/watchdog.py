"""Detects a silent relay connection and asks for a reconnect.

The relay occasionally stops delivering to a subscriber without closing the
socket. When nothing has arrived for `timeout` seconds, the game's launcher
status endpoint is asked whether the servers are up. If they are, the silence
is local, so an alert is raised and `on_outage` is called to force a reconnect.

There is no backoff or retry limit beyond the poll interval. The feed is lossy
anyway; the watchdog only tries to get it flowing again.
"""

from ebgs.config import get_config

import requests
import sys
import threading
import time

# Value of `status` in the launcher status document meaning "servers up"
STATUS_UP = 2


def print_alert(message):
    print(f'ALERT: {message}', file=sys.stderr)


class Watchdog:
    def __init__(self, on_outage, *, status_url=None, timeout=None,
            poll_interval=None, status_timeout=None, alert=print_alert,
            clock=time.monotonic):
        """
        Args:
            on_outage: Called (from the watchdog thread) when the silence is
                    judged to be local. Must be safe to call from another
                    thread.
            alert: Reporting sink for outages; takes a message string.
            clock: Monotonic seconds; injectable for tests.
        """
        cfg = get_config()['eddn']
        self.on_outage = on_outage
        self.status_url = status_url or cfg['status_url']
        self.timeout = timeout if timeout is not None else cfg['timeout']
        self.poll_interval = (poll_interval if poll_interval is not None
                else cfg['poll_interval'])
        self.status_timeout = (status_timeout if status_timeout is not None
                else cfg['status_timeout'])
        self.alert = alert
        self.clock = clock

        self._lock = threading.Lock()
        self._last_message = clock()
        self._stop = threading.Event()
        self._thread = None


    def touch(self):
        """Records that a message just arrived.
        """
        now = self.clock()
        with self._lock:
            self._last_message = now


    def silence(self):
        """Seconds since the last message.
        """
        with self._lock:
            last = self._last_message
        return self.clock() - last


    def feed_status(self):
        """Returns the launcher's `status` value, or None if it could not be
        retrieved.
        """
        try:
            r = requests.get(self.status_url, timeout=self.status_timeout)
            if r.status_code != 200:
                return None
            return r.json().get('status')
        except (requests.RequestException, ValueError, AttributeError):
            return None


    def check(self):
        """One poll. Returns True if a reconnect was forced.
        """
        if self.silence() <= self.timeout:
            return False

        status = self.feed_status()
        if status is None:
            # Status unknown; look again next interval
            return False

        forced = False
        if status == STATUS_UP:
            minutes = self.timeout / 60
            self.alert(f'No message received from EDDN for more than '
                    f'{minutes:g} minutes')
            self.on_outage()
            forced = True
        # Either reconnected, or the servers are down; start a new window.
        self.touch()
        return forced


    def start(self):
        assert self._thread is None, 'Watchdog already started'
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='eddn-watchdog',
                daemon=True)
        self._thread.start()


    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.poll_interval + 1)
            self._thread = None


    def _run(self):
        while not self._stop.wait(self.poll_interval):
            self.check()
