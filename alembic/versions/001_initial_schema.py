"""initial schema - forms, submissions, webhook logs

Revision ID: 001
Revises: 
Create Date: 2026-10-17 09:00:00.000000

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
    # Create forms table
    op.create_table(
        'forms',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('fields', sa.JSON(), nullable=False),
        sa.Column('settings', sa.JSON(), nullable=False),
        sa.Column('webhook_url', sa.Text(), nullable=True),
        sa.Column('webhook_config', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )

    # Create submissions table (webhook_status as VARCHAR, not enum)
    op.create_table(
        'submissions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('form_id', sa.String(36), sa.ForeignKey('forms.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('webhook_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('webhook_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('webhook_response', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )

    # Create webhook_logs table (append-only, one row per delivery attempt)
    op.create_table(
        'webhook_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('submission_id', sa.String(36), sa.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('request_url', sa.Text(), nullable=False),
        sa.Column('request_body', sa.JSON(), nullable=True),
        sa.Column('request_headers', sa.JSON(), nullable=True),
        sa.Column('response_status', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('response_body', sa.Text(), nullable=True),
        sa.Column('attempt_number', sa.Integer(), nullable=False),
        sa.Column('successful', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('webhook_logs')
    op.drop_table('submissions')
    op.drop_table('forms')
