"""Methods for dealing with EBGS-wide configuration (DB access, feed endpoints,
query limits).
"""

import os

def get_config():
    """Retrieves global (singleton) config object.

    Retrieves the default config. `EBGS_DB_URL`, if set, replaces the composed
    database URL.
    """
    DEFAULT = {
            'db': {
                'user': 'postgres',
                'password': 'ebgs345',
                'host': 'localhost',
                'port': 9454,
                'db': 'ebgs_db',
                'url': os.environ.get('EBGS_DB_URL'),
            },
            'eddn': {
                'relay': 'tcp://eddn.edcd.io:9500',
                'status_url': 'http://hosting.zaonce.net/launcher-status/status.json',
                # Seconds
                'timeout': 300,
                'poll_interval': 10,
                'status_timeout': 10,
            },
            'query': {
                'page_size': 10,
                'history_workers': 8,
            },
    }
    return DEFAULT
