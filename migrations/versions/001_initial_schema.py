"""
Initial database schema

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-09-28 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create initial database schema."""
    
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('netid', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('length(netid) > 0', name='ck_users_netid_not_empty'),
    )
    op.create_index('ix_users_netid', 'users', ['netid'], unique=True)
    
    # Create courses table
    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('shortcode', sa.String(32), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    
    # Create course_staff association table
    op.create_table(
        'course_staff',
        sa.Column(
            'course_id', sa.Integer(),
            sa.ForeignKey('courses.id', ondelete='CASCADE'),
            primary_key=True
        ),
        sa.Column(
            'user_id', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            primary_key=True
        ),
    )
    
    # Create queues table
    op.create_table(
        'queues',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column(
            'course_id', sa.Integer(),
            sa.ForeignKey('courses.id', ondelete='CASCADE'),
            nullable=False
        ),
        sa.Column(
            'created_by_user_id', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True
        ),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_queues_course_id', 'queues', ['course_id'])
    op.create_index('ix_queues_course_deleted', 'queues', ['course_id', 'deleted_at'])
    
    # Create questions table
    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('topic', sa.String(255), nullable=False),
        sa.Column('enqueue_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('being_answered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('answer_start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('answer_finish_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('dequeue_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('preparedness', sa.String(16), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column(
            'queue_id', sa.Integer(),
            sa.ForeignKey('queues.id', ondelete='CASCADE'),
            nullable=False
        ),
        sa.Column(
            'asked_by_id', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False
        ),
        sa.Column(
            'answered_by_id', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True
        ),
    )
    op.create_index('ix_questions_asked_by_id', 'questions', ['asked_by_id'])
    op.create_index('ix_questions_queue_dequeue', 'questions', ['queue_id', 'dequeue_time'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('questions')
    op.drop_table('queues')
    op.drop_table('course_staff')
    op.drop_table('courses')
    op.drop_table('users')
