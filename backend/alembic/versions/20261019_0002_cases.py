"""cases table owned by users

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 10:15:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from casehub.models.common import ON_UPDATE_NOW


# revision identifiers, used by Alembic.
revision: str = "20261019_0002"
down_revision: Union[str, None] = "20261019_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cases",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("host", sa.String(length=100), nullable=False),
        sa.Column("uri", sa.String(length=200), nullable=False),
        sa.Column("method", sa.String(length=100), nullable=True),
        sa.Column("request_body", sa.Text(), nullable=True),
        sa.Column("expected_result", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("response_code", sa.Text(), nullable=True),
        sa.Column("response_body", sa.Text(), nullable=True),
        sa.Column("used", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            info={ON_UPDATE_NOW: True},
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("title", name="uq_cases_title"),
        mysql_engine="InnoDB",
        mysql_charset="utf8mb4",
    )
    op.create_index("ix_cases_user_id", "cases", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_cases_user_id", table_name="cases")
    op.drop_table("cases")
