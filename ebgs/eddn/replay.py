"""Reconciles captured EDDN traffic from a file, for backfills and debugging.

The file holds one inflated JSON envelope per line, the same documents the
relay sends. Lines are fed through the dispatcher in file order, exactly as the
listener would have handled them.
"""

from ebgs.eddn.dispatch import default_dispatcher
from ebgs.eddn.envelope import MalformedMessage, parse

import collections
from pathlib import Path
import tqdm


def replay_file(path: Path, dispatcher=None):
    """Returns a Counter of `messages`, `dropped` and `history_rows`.

    Store errors are not caught; a failed replay can simply be re-run, since
    stale events are discarded.
    """
    dispatcher = dispatcher or default_dispatcher()
    with open(path) as f:
        lines = [l for l in (fline.strip() for fline in f) if l]

    stats = collections.Counter()
    for line in tqdm.tqdm(lines, desc='replaying envelopes'):
        try:
            written = dispatcher.dispatch(parse(line))
        except MalformedMessage:
            stats['dropped'] += 1
            continue
        stats['messages'] += 1
        stats['history_rows'] += written or 0
    return stats
