from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_create_listing_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('first_name', sa.String(50), nullable=False),
        sa.Column('last_name', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20)),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(16), nullable=False, server_default='tenant'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now())
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'properties',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('short_description', sa.String(200)),
        sa.Column('property_type', sa.String(32), nullable=False),
        sa.Column('category', sa.String(32), nullable=False),
        sa.Column('rent', sa.Float, nullable=False),
        sa.Column('rent_type', sa.String(16), nullable=False, server_default='monthly'),
        sa.Column('currency', sa.String(8), nullable=False, server_default='PKR'),
        sa.Column('security_deposit', sa.Float),
        sa.Column('location', sa.JSON, nullable=False),
        sa.Column('specifications', sa.JSON, nullable=False),
        sa.Column('area', sa.JSON, nullable=False),
        sa.Column('features', sa.JSON, nullable=False),
        sa.Column('amenities', sa.JSON, nullable=False),
        sa.Column('contact_info', sa.JSON, nullable=False),
        sa.Column('terms', sa.JSON, nullable=False),
        sa.Column('images', sa.JSON, nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='available'),
        sa.Column('available_from', sa.DateTime),
        sa.Column('is_featured', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('views', sa.Integer, nullable=False, server_default='0'),
        sa.Column('saved_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column('slug', sa.String(255), unique=True),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('agent_id', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now())
    )
    op.create_index('ix_properties_property_type', 'properties', ['property_type'])
    op.create_index('ix_properties_rent', 'properties', ['rent'])
    op.create_index('ix_properties_status', 'properties', ['status'])
    op.create_index('ix_properties_is_featured', 'properties', ['is_featured'])
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])
    op.create_index('ix_properties_agent_id', 'properties', ['agent_id'])
    op.create_index('ix_properties_created_at', 'properties', ['created_at'])

    op.create_table(
        'saved_properties',
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now())
    )


def downgrade():
    op.drop_table('saved_properties')
    op.drop_table('properties')
    op.drop_table('users')
