"""Create users and books tables

Revision ID: 3f1c2a9d7e40
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=50), nullable=False, comment="User's email address (used for login)"),
        sa.Column('password', sa.CHAR(length=60), nullable=False, comment='Bcrypt hashed password'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('books',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('isbn', sa.BigInteger(), nullable=False, comment='International Standard Book Number'),
        sa.Column('title', sa.String(length=120), nullable=False, comment='Book title, upper-cased'),
        sa.Column('author', sa.String(length=100), nullable=False, comment='Author name, upper-cased, or S.A when unknown'),
        sa.Column('publisher', sa.String(length=50), nullable=False, comment='Publisher name, upper-cased, or S.E when unknown'),
        sa.Column('publication_year', sa.String(length=6), nullable=False, comment='Publication year, or S.F when unknown'),
        sa.Column('location', sa.String(length=6), nullable=False, comment='Shelf slot as <shelf>-<section><number>, or ---'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('location')
    )
    op.create_index(op.f('ix_books_isbn'), 'books', ['isbn'], unique=True)
    op.create_index(op.f('ix_books_title'), 'books', ['title'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_books_title'), table_name='books')
    op.drop_index(op.f('ix_books_isbn'), table_name='books')
    op.drop_table('books')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
