"""EBGS's core schema.

Three current-state tables (`system`, `faction` + `faction_presence`,
`station`) are updated in place by the reconcilers. Each has a matching history
table, which is append-only: rows are written once, when the reconciler detects
a change in the fields listed in that history class's `RELEVANT`, and never
updated afterwards.
"""

import datetime
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import registry
import sqlalchemy_json as sj
from typing import Any, Dict, List

mapper_registry = registry()
Base = mapper_registry.generate_base()
# Annotations in this module document column types; they are not `Mapped[]`.
Base.__allow_unmapped__ = True

# JSONB on postgres; generic JSON elsewhere (sqlite, for tests).
DbJsonList = lambda: sa.JSON().with_variant(JSONB(), 'postgresql')
DbJson = lambda: sj.mutable_json_type(dbtype=DbJsonList(), nested=True)


class DataClassMixin:
    def asdict(self):
        r = {c.key: getattr(self, c.key)
                for c in sa.inspect(type(self)).column_attrs}
        def encobjs(r):
            # Recursively remove sqlalchemy wrapper magic
            if isinstance(r, dict):
                return {k: encobjs(v) for k, v in r.items()}
            elif isinstance(r, list):
                return [encobjs(v) for v in r]
            return r
        return encobjs(r)


class System(Base, DataClassMixin):
    '''A star system, keyed by its lower-cased name. `system_address` is the
    game's own catalog id, filled in whenever the feed carries it.
    '''
    __tablename__ = 'system'
    def __repr__(self):
        cls = self.__class__
        return f'<{cls.__module__}.{cls.__name__} {self.id}: {self.name}>'

    id: int = sa.Column(sa.Integer, primary_key=True)
    eddb_id: int = sa.Column(sa.Integer, index=True)
    system_address: int = sa.Column(sa.BigInteger, index=True)

    name: str = sa.Column(sa.String, nullable=False)
    name_lower: str = sa.Column(sa.String, nullable=False, unique=True)

    government: str = sa.Column(sa.String, index=True)
    allegiance: str = sa.Column(sa.String, index=True)
    state: str = sa.Column(sa.String, index=True)
    security: str = sa.Column(sa.String, index=True)
    population: int = sa.Column(sa.BigInteger)
    primary_economy: str = sa.Column(sa.String, index=True)
    secondary_economy: str = sa.Column(sa.String)
    controlling_minor_faction: str = sa.Column(sa.String)
    controlling_minor_faction_lower: str = sa.Column(sa.String, index=True)

    # [{'name': ..., 'name_lower': ...}] for every faction present
    factions: List[Dict[str, Any]] = sa.Column(DbJsonList(), nullable=False,
            default=lambda: [])

    # Miscellaneous, unindexed information (star position, conflicts)
    attrs: Dict[str, Any] = sa.Column(DbJson(), nullable=False,
            default=lambda: {})

    updated_at: datetime.datetime = sa.Column(sa.DateTime, nullable=False)
    updated_by: str = sa.Column(sa.String)


class Faction(Base, DataClassMixin):
    '''A minor faction. The feed carries no catalog id for factions, so the
    lower-cased name is the key.

    Attributes:
        presence: One `FactionPresence` per system the faction has been seen in,
                ordered by system name.
    '''
    __tablename__ = 'faction'
    def __repr__(self):
        cls = self.__class__
        return f'<{cls.__module__}.{cls.__name__} {self.id}: {self.name}>'

    id: int = sa.Column(sa.Integer, primary_key=True)
    eddb_id: int = sa.Column(sa.Integer, index=True)

    name: str = sa.Column(sa.String, nullable=False)
    name_lower: str = sa.Column(sa.String, nullable=False, unique=True)

    government: str = sa.Column(sa.String, index=True)
    allegiance: str = sa.Column(sa.String, index=True)

    updated_at: datetime.datetime = sa.Column(sa.DateTime, nullable=False)
    updated_by: str = sa.Column(sa.String)

    presence = sa.orm.relationship('FactionPresence', back_populates='faction',
            order_by='FactionPresence.system_name_lower',
            cascade='all, delete-orphan')

    def presence_in(self, system_lower):
        """Returns the `FactionPresence` for `system_lower`, or None.
        """
        for p in self.presence:
            if p.system_name_lower == system_lower:
                return p
        return None


class FactionPresence(Base, DataClassMixin):
    '''A faction's state within one system.

    State lists hold `{'state': ...}` dicts; pending and recovering entries also
    carry `trend`.
    '''
    __tablename__ = 'faction_presence'
    def __repr__(self):
        cls = self.__class__
        return (f'<{cls.__module__}.{cls.__name__} {self.id}: '
                f'{self.faction_id} in {self.system_name}>')

    id: int = sa.Column(sa.Integer, primary_key=True)

    faction_id: int = sa.Column(sa.Integer,
            sa.ForeignKey('faction.id', ondelete='CASCADE'),
            nullable=False,
            index=True)
    faction = sa.orm.relationship('Faction', back_populates='presence')

    system_name: str = sa.Column(sa.String, nullable=False)
    system_name_lower: str = sa.Column(sa.String, nullable=False, index=True)

    state: str = sa.Column(sa.String)
    influence: float = sa.Column(sa.Float)
    happiness: str = sa.Column(sa.String)
    active_states: List[Dict[str, Any]] = sa.Column(DbJsonList(),
            nullable=False, default=lambda: [])
    pending_states: List[Dict[str, Any]] = sa.Column(DbJsonList(),
            nullable=False, default=lambda: [])
    recovering_states: List[Dict[str, Any]] = sa.Column(DbJsonList(),
            nullable=False, default=lambda: [])

    updated_at: datetime.datetime = sa.Column(sa.DateTime, nullable=False)

    __table_args__ = (
            sa.UniqueConstraint('faction_id', 'system_name_lower',
                name='uq_faction_presence_system'),
    )


class Station(Base, DataClassMixin):
    '''A station or settlement. Keyed by `market_id` when the feed provides it,
    otherwise by lower-cased name within its system.
    '''
    __tablename__ = 'station'
    def __repr__(self):
        cls = self.__class__
        return f'<{cls.__module__}.{cls.__name__} {self.id}: {self.name} ({self.system})>'

    id: int = sa.Column(sa.Integer, primary_key=True)
    eddb_id: int = sa.Column(sa.Integer, index=True)
    market_id: int = sa.Column(sa.BigInteger, unique=True)

    name: str = sa.Column(sa.String, nullable=False)
    name_lower: str = sa.Column(sa.String, nullable=False)
    system: str = sa.Column(sa.String, nullable=False)
    system_lower: str = sa.Column(sa.String, nullable=False, index=True)

    type: str = sa.Column(sa.String, index=True)
    government: str = sa.Column(sa.String, index=True)
    allegiance: str = sa.Column(sa.String, index=True)
    economy: str = sa.Column(sa.String, index=True)
    state: str = sa.Column(sa.String, index=True)
    controlling_minor_faction: str = sa.Column(sa.String)
    controlling_minor_faction_lower: str = sa.Column(sa.String, index=True)
    services: List[str] = sa.Column(DbJsonList(), nullable=False,
            default=lambda: [])

    # Economy proportions, distance from arrival star
    attrs: Dict[str, Any] = sa.Column(DbJson(), nullable=False,
            default=lambda: {})

    updated_at: datetime.datetime = sa.Column(sa.DateTime, nullable=False)
    updated_by: str = sa.Column(sa.String)

    __table_args__ = (
            sa.Index('idx_station_name_system', 'name_lower', 'system_lower'),
    )


class SystemHistory(Base, DataClassMixin):
    '''Snapshot of a system's relevant fields.'''
    __tablename__ = 'system_history'
    RELEVANT = ('government', 'allegiance', 'state', 'security', 'population',
            'primary_economy', 'secondary_economy', 'controlling_minor_faction',
            'factions')
    OWNER_FIELDS = ('system_id', 'system_name_lower')

    id: int = sa.Column(sa.Integer, primary_key=True)
    system_id: int = sa.Column(sa.Integer,
            sa.ForeignKey('system.id', ondelete='CASCADE'),
            nullable=False)
    system = sa.orm.relationship('System')
    system_name_lower: str = sa.Column(sa.String, nullable=False)

    updated_at: datetime.datetime = sa.Column(sa.DateTime, nullable=False)
    updated_by: str = sa.Column(sa.String)

    government: str = sa.Column(sa.String)
    allegiance: str = sa.Column(sa.String)
    state: str = sa.Column(sa.String)
    security: str = sa.Column(sa.String)
    population: int = sa.Column(sa.BigInteger)
    primary_economy: str = sa.Column(sa.String)
    secondary_economy: str = sa.Column(sa.String)
    controlling_minor_faction: str = sa.Column(sa.String)
    factions: List[Dict[str, Any]] = sa.Column(DbJsonList(), nullable=False,
            default=lambda: [])

    __table_args__ = (
            sa.Index('idx_system_history_by_timestamp', 'system_id', 'updated_at'),
    )


class FactionHistory(Base, DataClassMixin):
    '''Snapshot of one `FactionPresence`.'''
    __tablename__ = 'faction_history'
    RELEVANT = ('state', 'influence', 'happiness', 'active_states',
            'pending_states', 'recovering_states')
    OWNER_FIELDS = ('faction_id', 'faction_name', 'faction_name_lower')

    id: int = sa.Column(sa.Integer, primary_key=True)
    faction_id: int = sa.Column(sa.Integer,
            sa.ForeignKey('faction.id', ondelete='CASCADE'),
            nullable=False)
    faction = sa.orm.relationship('Faction')
    faction_name: str = sa.Column(sa.String, nullable=False)
    faction_name_lower: str = sa.Column(sa.String, nullable=False)

    system: str = sa.Column(sa.String, nullable=False)
    system_lower: str = sa.Column(sa.String, nullable=False)

    updated_at: datetime.datetime = sa.Column(sa.DateTime, nullable=False)
    updated_by: str = sa.Column(sa.String)

    state: str = sa.Column(sa.String)
    influence: float = sa.Column(sa.Float)
    happiness: str = sa.Column(sa.String)
    active_states: List[Dict[str, Any]] = sa.Column(DbJsonList(),
            nullable=False, default=lambda: [])
    pending_states: List[Dict[str, Any]] = sa.Column(DbJsonList(),
            nullable=False, default=lambda: [])
    recovering_states: List[Dict[str, Any]] = sa.Column(DbJsonList(),
            nullable=False, default=lambda: [])

    __table_args__ = (
            sa.Index('idx_faction_history_by_timestamp', 'faction_id',
                'system_lower', 'updated_at'),
    )


class StationHistory(Base, DataClassMixin):
    '''Snapshot of a station's relevant fields.'''
    __tablename__ = 'station_history'
    RELEVANT = ('type', 'government', 'allegiance', 'economy', 'state',
            'controlling_minor_faction', 'services', 'economies')
    OWNER_FIELDS = ('station_id', 'station_name_lower')

    id: int = sa.Column(sa.Integer, primary_key=True)
    station_id: int = sa.Column(sa.Integer,
            sa.ForeignKey('station.id', ondelete='CASCADE'),
            nullable=False)
    station = sa.orm.relationship('Station')
    station_name_lower: str = sa.Column(sa.String, nullable=False)

    updated_at: datetime.datetime = sa.Column(sa.DateTime, nullable=False)
    updated_by: str = sa.Column(sa.String)

    type: str = sa.Column(sa.String)
    government: str = sa.Column(sa.String)
    allegiance: str = sa.Column(sa.String)
    economy: str = sa.Column(sa.String)
    state: str = sa.Column(sa.String)
    controlling_minor_faction: str = sa.Column(sa.String)
    services: List[str] = sa.Column(DbJsonList(), nullable=False,
            default=lambda: [])
    economies: List[Dict[str, Any]] = sa.Column(DbJsonList(), nullable=False,
            default=lambda: [])

    __table_args__ = (
            sa.Index('idx_station_history_by_timestamp', 'station_id', 'updated_at'),
    )
