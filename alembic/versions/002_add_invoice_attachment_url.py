"""Add invoice attachment column

Revision ID: 002
Revises: 001
Create Date: 2026-05-14

Databases that never ran this migration are repaired on first invoice write
by services.schema_guard, so the upgrade tolerates an existing column.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade() -> None:
    columns = {c['name'] for c in sa.inspect(op.get_bind()).get_columns('invoices')}
    if 'attachment_url' not in columns:
        op.add_column('invoices', sa.Column('attachment_url', sa.Text()))


def downgrade() -> None:
    with op.batch_alter_table('invoices') as batch_op:
        batch_op.drop_column('attachment_url')
