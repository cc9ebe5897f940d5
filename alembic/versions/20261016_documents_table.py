"""Documents table for case and user records

Revision ID: 001_documents
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_documents'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create documents table matching the DocumentDB model."""
    op.create_table(
        'documents',
        sa.Column('collection', sa.String(length=50), nullable=False),
        sa.Column('doc_id', sa.String(length=100), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('collection', 'doc_id')
    )


def downgrade() -> None:
    """Drop documents table."""
    op.drop_table('documents')
