"""Database interaction code and utilities.

Current state lives in `system`, `faction` (+ `faction_presence`) and `station`;
each has an append-only `*_history` table which only grows when the reconciler
sees a real change.

SQLAlchemy tricks (as with `ebgs_cli.py shell`):

```python
>>> s = sess()
>>> f = s.execute(sa.select(sch.Faction).where(
...         sch.Faction.name_lower == 'the dark wheel')).scalar()
>>> [p.system_name for p in f.presence]
['Shinrarta Dezhra']
# Last 3 snapshots of that presence
>>> s.execute(sa.select(sch.FactionHistory)
...         .where(sch.FactionHistory.faction_id == f.id)
...         .order_by(sch.FactionHistory.updated_at.desc()).limit(3)).scalars().all()
```
"""
