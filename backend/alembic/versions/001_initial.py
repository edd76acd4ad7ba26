"""Initial migration - create all tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

# LONGBLOB on MySQL, BLOB elsewhere
blob = sa.LargeBinary().with_variant(mysql.LONGBLOB(), 'mysql')


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('firstname', sa.String(100), nullable=False),
        sa.Column('lastname', sa.String(100), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('avatar', sa.String(500), nullable=True),
        sa.Column('cover', sa.String(500), nullable=True),
        sa.Column('channel_description', sa.Text, nullable=True),
        sa.Column('is_admin', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_owner', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Create categories table
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('is_default', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)

    # Create videos table
    op.create_table(
        'videos',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('url', sa.String(1000), nullable=True),
        sa.Column('thumbnail', sa.String(1000), nullable=True),
        sa.Column('category', sa.String(100), nullable=False, server_default='movies'),
        sa.Column('featured', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('upload_type', sa.String(10), nullable=False, server_default='url'),
        sa.Column('video_file', blob, nullable=True),
        sa.Column('file_name', sa.String(255), nullable=True),
        sa.Column('file_size', sa.BigInteger, nullable=True),
        sa.Column('mime_type', sa.String(100), nullable=True),
        sa.Column('thumbnail_file', blob, nullable=True),
        sa.Column('thumbnail_file_name', sa.String(255), nullable=True),
        sa.Column('thumbnail_file_size', sa.BigInteger, nullable=True),
        sa.Column('thumbnail_mime_type', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_videos_user_id', 'videos', ['user_id'])
    op.create_index('ix_videos_category', 'videos', ['category'])
    op.create_index('ix_videos_created_at', 'videos', ['created_at'])

    # Create comments table
    op.create_table(
        'comments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('text', sa.Text, nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('video_id', sa.String(36), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])
    op.create_index('ix_comments_video_id', 'comments', ['video_id'])

    # Create video_likes table (one row per user and video)
    op.create_table(
        'video_likes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('video_id', sa.String(36), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('like', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'video_id', name='uq_video_likes_user_video'),
    )
    op.create_index('ix_video_likes_user_id', 'video_likes', ['user_id'])
    op.create_index('ix_video_likes_video_id', 'video_likes', ['video_id'])

    # Create views table (one row per user and video)
    op.create_table(
        'views',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('video_id', sa.String(36), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'video_id', name='uq_views_user_video'),
    )
    op.create_index('ix_views_user_id', 'views', ['user_id'])
    op.create_index('ix_views_video_id', 'views', ['video_id'])

    # Create subscriptions table
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('subscriber', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subscribe_to', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.UniqueConstraint('subscriber', 'subscribe_to', name='uq_subscriptions_pair'),
    )
    op.create_index('ix_subscriptions_subscriber', 'subscriptions', ['subscriber'])
    op.create_index('ix_subscriptions_subscribe_to', 'subscriptions', ['subscribe_to'])


def downgrade() -> None:
    op.drop_table('subscriptions')
    op.drop_table('views')
    op.drop_table('video_likes')
    op.drop_table('comments')
    op.drop_table('videos')
    op.drop_table('categories')
    op.drop_table('users')
