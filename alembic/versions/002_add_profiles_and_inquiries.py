from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002_add_profiles_and_inquiries'
down_revision = '001_create_listing_tables'
branch_labels = None
depends_on = None

PROFILE_COLUMNS = (
    ('is_verified', sa.Boolean, {'nullable': False, 'server_default': sa.false()}),
    ('profile_picture', sa.String(500), {}),
    ('date_of_birth', sa.DateTime, {}),
    ('gender', sa.String(16), {}),
    ('address', sa.JSON, {}),
    ('preferences', sa.JSON, {}),
    ('last_login', sa.DateTime, {}),
    ('deactivation_reason', sa.String(500), {}),
    ('deactivated_at', sa.DateTime, {}),
)


def upgrade():
    for name, type_, options in PROFILE_COLUMNS:
        op.add_column('users', sa.Column(name, type_, **options))
    op.add_column('properties', sa.Column('inquiry_count', sa.Integer, nullable=False, server_default='0'))

    op.create_table(
        'inquiries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(16), nullable=False, server_default='general'),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending'),
        sa.Column('priority', sa.String(16), nullable=False, server_default='medium'),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('requirements', sa.JSON, nullable=False),
        sa.Column('contact_info', sa.JSON, nullable=False),
        sa.Column('viewing', sa.JSON, nullable=False),
        sa.Column('response', sa.JSON),
        sa.Column('communication', sa.JSON, nullable=False),
        sa.Column('total_interactions', sa.Integer, nullable=False, server_default='0'),
        sa.Column('source', sa.String(16), nullable=False, server_default='website'),
        sa.Column('read_at', sa.DateTime),
        sa.Column('responded_at', sa.DateTime),
        sa.Column('expires_at', sa.DateTime),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now())
    )
    op.create_index('ix_inquiries_property_id', 'inquiries', ['property_id'])
    op.create_index('ix_inquiries_tenant_id', 'inquiries', ['tenant_id'])
    op.create_index('ix_inquiries_owner_id', 'inquiries', ['owner_id'])
    op.create_index('ix_inquiries_status', 'inquiries', ['status'])
    op.create_index('ix_inquiries_created_at', 'inquiries', ['created_at'])


def downgrade():
    op.drop_table('inquiries')
    op.drop_column('properties', 'inquiry_count')
    for name, _, _ in reversed(PROFILE_COLUMNS):
        op.drop_column('users', name)
