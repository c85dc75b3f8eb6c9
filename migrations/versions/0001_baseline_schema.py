"""baseline_schema

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19 09:12:41.218734

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all backoffice tables (baseline schema)."""

    # Cloud saves
    op.create_table(
        'cloud_saves',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('save_json', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', 'username', name='unique_email_username')
    )
    op.create_index(op.f('ix_cloud_saves_email'), 'cloud_saves', ['email'], unique=False)

    op.create_table(
        'cloud_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cloud_logs_email'), 'cloud_logs', ['email'], unique=False)
    op.create_index(op.f('ix_cloud_logs_device_id'), 'cloud_logs', ['device_id'], unique=False)
    op.create_index(op.f('ix_cloud_logs_created_at'), 'cloud_logs', ['created_at'], unique=False)

    # Orders and license keys (orders first due to FK dependencies)
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('order_code', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('issued_key', sa.String(length=32), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_orders_email'), 'orders', ['email'], unique=False)
    op.create_index(op.f('ix_orders_order_code'), 'orders', ['order_code'], unique=True)
    op.create_index(op.f('ix_orders_status'), 'orders', ['status'], unique=False)

    op.create_table(
        'license_keys',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('license_key', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('device_hash', sa.String(length=128), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id')
    )
    op.create_index(op.f('ix_license_keys_license_key'), 'license_keys', ['license_key'], unique=True)
    op.create_index(op.f('ix_license_keys_email'), 'license_keys', ['email'], unique=False)

    # Per-account gameplay state
    op.create_table(
        'account_reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('wins_total', sa.Integer(), server_default='0', nullable=False),
        sa.Column('losses_total', sa.Integer(), server_default='0', nullable=False),
        sa.Column('has_won', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('first_win_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('achievements_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', 'username', name='uq_account_reports_email_username')
    )
    op.create_index(op.f('ix_account_reports_email'), 'account_reports', ['email'], unique=False)

    op.create_table(
        'account_achievements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('achievement_key', sa.String(length=128), nullable=False),
        sa.Column('unlocked_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', 'username', 'achievement_key',
                            name='uq_account_achievements_email_username_key')
    )
    op.create_index(op.f('ix_account_achievements_email'), 'account_achievements', ['email'], unique=False)

    op.create_table(
        'account_devices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('first_seen_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', 'username', 'device_id',
                            name='uq_account_devices_email_username_device')
    )
    op.create_index(op.f('ix_account_devices_email'), 'account_devices', ['email'], unique=False)
    op.create_index(op.f('ix_account_devices_device_id'), 'account_devices', ['device_id'], unique=False)

    op.create_table(
        'account_warnings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('is_warned', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', 'username', name='uq_account_warnings_email_username')
    )
    op.create_index(op.f('ix_account_warnings_email'), 'account_warnings', ['email'], unique=False)

    op.create_table(
        'device_bans',
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('is_banned', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('device_id')
    )


def downgrade() -> None:
    op.drop_table('device_bans')
    op.drop_index(op.f('ix_account_warnings_email'), table_name='account_warnings')
    op.drop_table('account_warnings')
    op.drop_index(op.f('ix_account_devices_device_id'), table_name='account_devices')
    op.drop_index(op.f('ix_account_devices_email'), table_name='account_devices')
    op.drop_table('account_devices')
    op.drop_index(op.f('ix_account_achievements_email'), table_name='account_achievements')
    op.drop_table('account_achievements')
    op.drop_index(op.f('ix_account_reports_email'), table_name='account_reports')
    op.drop_table('account_reports')
    op.drop_index(op.f('ix_license_keys_email'), table_name='license_keys')
    op.drop_index(op.f('ix_license_keys_license_key'), table_name='license_keys')
    op.drop_table('license_keys')
    op.drop_index(op.f('ix_orders_status'), table_name='orders')
    op.drop_index(op.f('ix_orders_order_code'), table_name='orders')
    op.drop_index(op.f('ix_orders_email'), table_name='orders')
    op.drop_table('orders')
    op.drop_index(op.f('ix_cloud_logs_created_at'), table_name='cloud_logs')
    op.drop_index(op.f('ix_cloud_logs_device_id'), table_name='cloud_logs')
    op.drop_index(op.f('ix_cloud_logs_email'), table_name='cloud_logs')
    op.drop_table('cloud_logs')
    op.drop_index(op.f('ix_cloud_saves_email'), table_name='cloud_saves')
    op.drop_table('cloud_saves')
