"""initial schema

Revision ID: 5f0c2a9d41b7
Revises:
Create Date: 2026-10-18 09:12:44.310552

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '5f0c2a9d41b7'
down_revision = None
branch_labels = None
depends_on = None


def _json():
    return sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade():
    op.create_table('system',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('eddb_id', sa.Integer(), nullable=True),
        sa.Column('system_address', sa.BigInteger(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('name_lower', sa.String(), nullable=False),
        sa.Column('government', sa.String(), nullable=True),
        sa.Column('allegiance', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('security', sa.String(), nullable=True),
        sa.Column('population', sa.BigInteger(), nullable=True),
        sa.Column('primary_economy', sa.String(), nullable=True),
        sa.Column('secondary_economy', sa.String(), nullable=True),
        sa.Column('controlling_minor_faction', sa.String(), nullable=True),
        sa.Column('controlling_minor_faction_lower', sa.String(), nullable=True),
        sa.Column('factions', _json(), nullable=False),
        sa.Column('attrs', _json(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name_lower')
    )
    for col in ['eddb_id', 'system_address', 'government', 'allegiance',
            'state', 'security', 'primary_economy',
            'controlling_minor_faction_lower']:
        op.create_index(op.f(f'ix_system_{col}'), 'system', [col], unique=False)

    op.create_table('faction',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('eddb_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('name_lower', sa.String(), nullable=False),
        sa.Column('government', sa.String(), nullable=True),
        sa.Column('allegiance', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name_lower')
    )
    for col in ['eddb_id', 'government', 'allegiance']:
        op.create_index(op.f(f'ix_faction_{col}'), 'faction', [col], unique=False)

    op.create_table('faction_presence',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('faction_id', sa.Integer(), nullable=False),
        sa.Column('system_name', sa.String(), nullable=False),
        sa.Column('system_name_lower', sa.String(), nullable=False),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('influence', sa.Float(), nullable=True),
        sa.Column('happiness', sa.String(), nullable=True),
        sa.Column('active_states', _json(), nullable=False),
        sa.Column('pending_states', _json(), nullable=False),
        sa.Column('recovering_states', _json(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['faction_id'], ['faction.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('faction_id', 'system_name_lower',
            name='uq_faction_presence_system')
    )
    for col in ['faction_id', 'system_name_lower']:
        op.create_index(op.f(f'ix_faction_presence_{col}'), 'faction_presence',
                [col], unique=False)

    op.create_table('station',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('eddb_id', sa.Integer(), nullable=True),
        sa.Column('market_id', sa.BigInteger(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('name_lower', sa.String(), nullable=False),
        sa.Column('system', sa.String(), nullable=False),
        sa.Column('system_lower', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=True),
        sa.Column('government', sa.String(), nullable=True),
        sa.Column('allegiance', sa.String(), nullable=True),
        sa.Column('economy', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('controlling_minor_faction', sa.String(), nullable=True),
        sa.Column('controlling_minor_faction_lower', sa.String(), nullable=True),
        sa.Column('services', _json(), nullable=False),
        sa.Column('attrs', _json(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('market_id')
    )
    op.create_index('idx_station_name_system', 'station',
            ['name_lower', 'system_lower'], unique=False)
    for col in ['eddb_id', 'system_lower', 'type', 'government', 'allegiance',
            'economy', 'state', 'controlling_minor_faction_lower']:
        op.create_index(op.f(f'ix_station_{col}'), 'station', [col], unique=False)

    op.create_table('system_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('system_id', sa.Integer(), nullable=False),
        sa.Column('system_name_lower', sa.String(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('government', sa.String(), nullable=True),
        sa.Column('allegiance', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('security', sa.String(), nullable=True),
        sa.Column('population', sa.BigInteger(), nullable=True),
        sa.Column('primary_economy', sa.String(), nullable=True),
        sa.Column('secondary_economy', sa.String(), nullable=True),
        sa.Column('controlling_minor_faction', sa.String(), nullable=True),
        sa.Column('factions', _json(), nullable=False),
        sa.ForeignKeyConstraint(['system_id'], ['system.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_system_history_by_timestamp', 'system_history',
            ['system_id', 'updated_at'], unique=False)

    op.create_table('faction_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('faction_id', sa.Integer(), nullable=False),
        sa.Column('faction_name', sa.String(), nullable=False),
        sa.Column('faction_name_lower', sa.String(), nullable=False),
        sa.Column('system', sa.String(), nullable=False),
        sa.Column('system_lower', sa.String(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('influence', sa.Float(), nullable=True),
        sa.Column('happiness', sa.String(), nullable=True),
        sa.Column('active_states', _json(), nullable=False),
        sa.Column('pending_states', _json(), nullable=False),
        sa.Column('recovering_states', _json(), nullable=False),
        sa.ForeignKeyConstraint(['faction_id'], ['faction.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_faction_history_by_timestamp', 'faction_history',
            ['faction_id', 'system_lower', 'updated_at'], unique=False)

    op.create_table('station_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('station_id', sa.Integer(), nullable=False),
        sa.Column('station_name_lower', sa.String(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('type', sa.String(), nullable=True),
        sa.Column('government', sa.String(), nullable=True),
        sa.Column('allegiance', sa.String(), nullable=True),
        sa.Column('economy', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('controlling_minor_faction', sa.String(), nullable=True),
        sa.Column('services', _json(), nullable=False),
        sa.Column('economies', _json(), nullable=False),
        sa.ForeignKeyConstraint(['station_id'], ['station.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_station_history_by_timestamp', 'station_history',
            ['station_id', 'updated_at'], unique=False)


def downgrade():
    for table in ['station_history', 'faction_history', 'system_history',
            'station', 'faction_presence', 'faction', 'system']:
        op.drop_table(table)
