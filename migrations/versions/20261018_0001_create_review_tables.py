from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_create_review_tables'
down_revision = None
branch_labels = None
depends_on = None

comment_type = sa.Enum('REVIEW', 'ORDER_NOTE', 'COMMENT', name='commenttype')
comment_status = sa.Enum('APPROVED', 'HOLD', 'SPAM', 'TRASH', name='commentstatus')


def upgrade():
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False)
    )
    op.create_index('ix_products_id', 'products', ['id'])

    op.create_table(
        'product_purchases',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('product_id', 'customer_email', name='uq_purchase_product_email')
    )
    op.create_index('ix_product_purchases_id', 'product_purchases', ['id'])
    op.create_index('ix_product_purchases_product_id', 'product_purchases', ['product_id'])
    op.create_index('ix_product_purchases_customer_email', 'product_purchases', ['customer_email'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('comment_type', comment_type, nullable=False),
        sa.Column('status', comment_status, nullable=False),
        sa.Column('author_name', sa.String(length=255), nullable=False),
        sa.Column('author_email', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('date_created', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False)
    )
    op.create_index('ix_comments_id', 'comments', ['id'])
    op.create_index('ix_comments_product_id', 'comments', ['product_id'])
    op.create_index(
        'idx_comment_product_type_status', 'comments',
        ['product_id', 'comment_type', 'status']
    )


def downgrade():
    op.drop_index('idx_comment_product_type_status', table_name='comments')
    op.drop_index('ix_comments_product_id', table_name='comments')
    op.drop_index('ix_comments_id', table_name='comments')
    op.drop_table('comments')
    op.drop_table('product_purchases')
    op.drop_table('products')
    comment_status.drop(op.get_bind(), checkfirst=True)
    comment_type.drop(op.get_bind(), checkfirst=True)
