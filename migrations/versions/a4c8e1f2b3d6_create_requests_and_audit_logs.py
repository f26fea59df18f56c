"""create requests and audit logs

Revision ID: a4c8e1f2b3d6
Revises:
Create Date: 2026-02-14 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a4c8e1f2b3d6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('language', sa.String(length=50), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('internal_notes', sa.Text(), nullable=True),
        sa.Column('preferred_contact', sa.String(length=20), nullable=False),
        sa.Column('wants_appointment', sa.Boolean(), nullable=False),
        sa.Column('appointment_preference', sa.String(length=500), nullable=True),
        sa.Column('appointment_date', sa.Date(), nullable=True),
        sa.Column('appointment_time_slot', sa.String(length=20), nullable=True),
        sa.Column('instagram_handle', sa.String(length=100), nullable=True),
        sa.Column('zoom_link', sa.String(length=2000), nullable=True),
        sa.Column('zoom_meeting_id', sa.String(length=64), nullable=True),
        sa.Column('reschedule_token', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('requests', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_requests_created_at'), ['created_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_requests_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_requests_appointment_date'), ['appointment_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_requests_reschedule_token'), ['reschedule_token'], unique=True)

    op.create_index(
        'uq_requests_active_slot',
        'requests',
        ['appointment_date', 'appointment_time_slot'],
        unique=True,
        postgresql_where=sa.text("wants_appointment AND status IN ('new', 'in_progress')"),
        sqlite_where=sa.text("wants_appointment = 1 AND status IN ('new', 'in_progress')"),
    )

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('action', sa.String(length=80), nullable=False),
        sa.Column('entity', sa.String(length=40), nullable=True),
        sa.Column('entity_id', sa.String(length=80), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('details_json', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_audit_logs_action'), ['action'], unique=False)
        batch_op.create_index(batch_op.f('ix_audit_logs_created_at'), ['created_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_audit_logs_entity_id'), ['entity_id'], unique=False)


def downgrade():
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_audit_logs_entity_id'))
        batch_op.drop_index(batch_op.f('ix_audit_logs_created_at'))
        batch_op.drop_index(batch_op.f('ix_audit_logs_action'))

    op.drop_table('audit_logs')
    op.drop_index('uq_requests_active_slot', table_name='requests')

    with op.batch_alter_table('requests', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_requests_reschedule_token'))
        batch_op.drop_index(batch_op.f('ix_requests_appointment_date'))
        batch_op.drop_index(batch_op.f('ix_requests_status'))
        batch_op.drop_index(batch_op.f('ix_requests_created_at'))

    op.drop_table('requests')
