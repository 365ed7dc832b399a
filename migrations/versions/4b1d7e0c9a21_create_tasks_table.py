"""create_tasks_table

Revision ID: 4b1d7e0c9a21
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b1d7e0c9a21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the tasks table with its listing indexes."""
    op.create_table('tasks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=256), nullable=False),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('done', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    # Matches the default listing order: open tasks first, then by due date
    op.create_index('ix_tasks_done_due_date', 'tasks', ['done', 'due_date'], unique=False)
    op.create_index(
        'ix_tasks_created_at',
        'tasks',
        [sa.text('created_at DESC')],
        unique=False,
    )


def downgrade() -> None:
    """Drop the tasks table."""
    op.drop_index('ix_tasks_created_at', table_name='tasks')
    op.drop_index('ix_tasks_done_due_date', table_name='tasks')
    op.drop_table('tasks')
