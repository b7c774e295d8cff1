"""seed default job catalog

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

from civmanager.data.jobs import list_default_jobs

# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None

jobs_table = sa.table(
    "jobs",
    sa.column("name", sa.String),
    sa.column("description", sa.Text),
    sa.column("min_strength", sa.Integer),
    sa.column("min_intelligence", sa.Integer),
    sa.column("min_charisma", sa.Integer),
)


def upgrade() -> None:
    op.bulk_insert(
        jobs_table,
        [
            {
                "name": job.name,
                "description": job.description,
                "min_strength": job.min_strength,
                "min_intelligence": job.min_intelligence,
                "min_charisma": job.min_charisma,
            }
            for job in list_default_jobs()
        ],
    )


def downgrade() -> None:
    names = [job.name for job in list_default_jobs()]
    op.execute(jobs_table.delete().where(jobs_table.c.name.in_(names)))
