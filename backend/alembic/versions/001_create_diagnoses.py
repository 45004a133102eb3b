"""Create diagnoses table.

Revision ID: 001_create_diagnoses
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_create_diagnoses"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "diagnoses",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("diagnosis_name", sa.String(500), nullable=False),
        sa.Column("justification", sa.String(2000), nullable=False),
        sa.Column("challenged_diagnosis", sa.String(500), nullable=True),
        sa.Column("challenged_justification", sa.String(2000), nullable=True),
        sa.Column("predicted_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_diagnoses_client_id_predicted_date",
        "diagnoses",
        ["client_id", "predicted_date"],
    )


def downgrade() -> None:
    op.drop_index("ix_diagnoses_client_id_predicted_date", table_name="diagnoses")
    op.drop_table("diagnoses")
