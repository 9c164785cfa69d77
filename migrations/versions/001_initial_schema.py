"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    user_role = postgresql.ENUM('USER', 'ADMIN', name='user_role')
    user_role.create(op.get_bind(), checkfirst=True)

    # Create users table
    op.create_table('users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('role', postgresql.ENUM('USER', 'ADMIN', name='user_role', create_type=False), server_default='USER', nullable=False),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    # Create problems table
    op.create_table('problems',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('difficulty', sa.String(length=10), nullable=False),
        sa.Column('tags', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('examples', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('constraints', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('testcases', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('code_snippets', postgresql.JSONB(), server_default='{}', nullable=False),
        sa.Column('reference_solutions', postgresql.JSONB(), server_default='{}', nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("difficulty IN ('EASY', 'MEDIUM', 'HARD')", name='check_difficulty'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_problems_difficulty', 'problems', ['difficulty'], unique=False)

    # Create problems_solved table
    op.create_table('problems_solved',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('problem_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['problem_id'], ['problems.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'problem_id', name='unique_user_problem_solved')
    )
    op.create_index('idx_problems_solved_user', 'problems_solved', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_problems_solved_user', table_name='problems_solved')
    op.drop_table('problems_solved')
    op.drop_index('idx_problems_difficulty', table_name='problems')
    op.drop_table('problems')
    op.drop_table('users')
    postgresql.ENUM(name='user_role').drop(op.get_bind(), checkfirst=True)
