"""create_portfolio_tables

Revision ID: 3a9c2e7b41d0
Revises:
Create Date: 2026-10-12 11:24:03.518204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a9c2e7b41d0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'portfolio_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name_ru', sa.String(), nullable=False),
        sa.Column('name_en', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('main_image_url', sa.String(), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index(op.f('ix_portfolio_categories_id'), 'portfolio_categories', ['id'])
    op.create_index(op.f('ix_portfolio_categories_slug'), 'portfolio_categories', ['slug'], unique=True)
    op.create_index(op.f('ix_portfolio_categories_order_index'), 'portfolio_categories', ['order_index'])

    op.create_table(
        'portfolio_media',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'category_id',
            sa.Integer(),
            sa.ForeignKey('portfolio_categories.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('media_url', sa.String(), nullable=False),
        sa.Column('title_ru', sa.String(), nullable=True),
        sa.Column('title_en', sa.String(), nullable=True),
        sa.Column('description_ru', sa.Text(), nullable=True),
        sa.Column('description_en', sa.Text(), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('media_type', sa.String(length=16), nullable=False, server_default='image'),
        *_timestamps(),
    )
    op.create_index(op.f('ix_portfolio_media_id'), 'portfolio_media', ['id'])
    op.create_index(op.f('ix_portfolio_media_category_id'), 'portfolio_media', ['category_id'])
    op.create_index(op.f('ix_portfolio_media_order_index'), 'portfolio_media', ['order_index'])

    op.create_table(
        'site_sections',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('title_ru', sa.String(), nullable=True),
        sa.Column('title_en', sa.String(), nullable=True),
        sa.Column('description_ru', sa.Text(), nullable=True),
        sa.Column('description_en', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index(op.f('ix_site_sections_id'), 'site_sections', ['id'])
    op.create_index(op.f('ix_site_sections_key'), 'site_sections', ['key'], unique=True)
    op.create_index(op.f('ix_site_sections_order_index'), 'site_sections', ['order_index'])

    # Seed the fixed set of editable sections
    sections = sa.table(
        'site_sections',
        sa.column('key', sa.String()),
        sa.column('order_index', sa.Integer()),
    )
    op.bulk_insert(sections, [
        {'key': key, 'order_index': position}
        for position, key in enumerate(['about', 'formats', 'prices', 'why-me', 'process', 'contacts'])
    ])


def downgrade() -> None:
    op.drop_table('site_sections')
    op.drop_table('portfolio_media')
    op.drop_table('portfolio_categories')
