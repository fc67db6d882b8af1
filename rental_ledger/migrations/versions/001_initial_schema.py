"""Create rental ledger tables.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-06-02 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create ledger tables."""
    op.create_table(
        'properties',
        *_timestamps(),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('reference_number', sa.String(50), nullable=False),
        sa.Column('address', sa.String(300), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('rental_type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reference_number'),
    )
    op.create_index('idx_property_status', 'properties', ['status'])

    op.create_table(
        'clients',
        *_timestamps(),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone_number', sa.String(50), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'locations',
        *_timestamps(),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('rental_start_date', sa.Date(), nullable=True),
        sa.Column('rental_end_date', sa.Date(), nullable=True),
        sa.Column('effective_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False),
        sa.Column('paid_months', sa.JSON(), nullable=True),
        sa.Column('paid_months_count', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_locations_property_id', 'locations', ['property_id'])
    op.create_index('ix_locations_client_id', 'locations', ['client_id'])
    op.create_index('idx_location_status_paid', 'locations', ['status', 'is_paid'])

    op.create_table(
        'payment_details',
        *_timestamps(),
        sa.Column('location_id', sa.Integer(), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_method', sa.String(20), nullable=False),
        sa.Column('months_covered', sa.Integer(), nullable=False),
        sa.Column('months_paid', sa.JSON(), nullable=False),
        sa.Column('idempotency_key', sa.String(100), nullable=True),
        sa.Column('receipt_url', sa.String(500), nullable=True),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('idempotency_key'),
    )
    op.create_index('ix_payment_details_location_id', 'payment_details', ['location_id'])
    op.create_index('ix_payment_details_payment_date', 'payment_details', ['payment_date'])
    op.create_index(
        'idx_payment_location_date', 'payment_details', ['location_id', 'payment_date']
    )

    op.create_table(
        'audit_logs',
        *_timestamps(),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Drop ledger tables."""
    op.drop_table('audit_logs')
    op.drop_index('idx_payment_location_date', table_name='payment_details')
    op.drop_index('ix_payment_details_payment_date', table_name='payment_details')
    op.drop_index('ix_payment_details_location_id', table_name='payment_details')
    op.drop_table('payment_details')
    op.drop_index('idx_location_status_paid', table_name='locations')
    op.drop_index('ix_locations_client_id', table_name='locations')
    op.drop_index('ix_locations_property_id', table_name='locations')
    op.drop_table('locations')
    op.drop_table('clients')
    op.drop_index('idx_property_status', table_name='properties')
    op.drop_table('properties')
