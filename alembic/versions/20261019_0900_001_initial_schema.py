"""Initial schema - users, sessions, trackings and names

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === Usuários ===
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('login', sa.String(100), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('empresa', sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_login', 'users', ['login'], unique=True)

    # === Sessões ===
    op.create_table(
        'user_sessions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_user_sessions_user_id', 'user_sessions', ['user_id'], unique=False)
    op.create_index('ix_user_sessions_expires_at', 'user_sessions', ['expires_at'], unique=False)

    # === Rastreios ===
    op.create_table(
        'trackings',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('tracking_code', sa.Text(), nullable=False),
        sa.Column('received_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDENTE'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('user', sa.Text(), nullable=True),
        sa.Column('empresa', sa.String(50), nullable=False, server_default='DEFAULT'),
        sa.Column('status_rastreio', sa.String(20), nullable=False, server_default='normal'),
        sa.PrimaryKeyConstraint('id')
    )
    # Código não é único: o mesmo pacote pode voltar em remessas diferentes
    op.create_index('ix_trackings_tracking_code', 'trackings', ['tracking_code'], unique=False)
    op.create_index('ix_trackings_empresa_received_at', 'trackings', ['empresa', 'received_at'], unique=False)

    # === Nomes customizados ===
    op.create_table(
        'name',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('users', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    op.drop_table('name')
    op.drop_index('ix_trackings_empresa_received_at', table_name='trackings')
    op.drop_index('ix_trackings_tracking_code', table_name='trackings')
    op.drop_table('trackings')
    op.drop_index('ix_user_sessions_expires_at', table_name='user_sessions')
    op.drop_index('ix_user_sessions_user_id', table_name='user_sessions')
    op.drop_table('user_sessions')
    op.drop_index('ix_users_login', table_name='users')
    op.drop_table('users')
