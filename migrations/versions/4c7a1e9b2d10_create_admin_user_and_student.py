"""create admin_user and student tables

Revision ID: 4c7a1e9b2d10
Revises:
Create Date: 2025-09-02 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c7a1e9b2d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'admin_user' not in existing_tables:
        op.create_table(
            'admin_user',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('role', sa.String(length=16), nullable=False, server_default='teacher'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_admin_user_username', 'admin_user', ['username'], unique=True)

    if 'student' not in existing_tables:
        op.create_table(
            'student',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('last_played', sa.Date(), nullable=True),
            sa.Column('achievements', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_student_email', 'student', ['email'], unique=True)


def downgrade():
    op.drop_index('ix_student_email', table_name='student')
    op.drop_table('student')
    op.drop_index('ix_admin_user_username', table_name='admin_user')
    op.drop_table('admin_user')
