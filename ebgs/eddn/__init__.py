"""Everything between the EDDN relay and the reconcilers.

.. mermaid::

    flowchart LR
    relay((EDDN relay)) --> listener
    watchdog -. reconnect .-> listener
    listener --> envelope[envelope.decode]
    envelope --> dispatch
    dispatch --> journal[reconcile.journal]
"""
