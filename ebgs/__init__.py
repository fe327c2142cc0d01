"""EBGS root module. Tracks the background simulation of Elite: Dangerous from
the public EDDN feed.

Submodules
==========

.. autosummary::
    :toctree: _autosummary

    cli
    db
    eddn
    query
    reconcile

Architecture
============

.. mermaid::

    graph LR;
    eddn --> reconcile
    reconcile --> db
    db --> query
"""
