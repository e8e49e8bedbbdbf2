"""move course tags to their own table

Revision ID: 5f2a9c7d1e63
Revises: 8d41b6e0c2f9
Create Date: 2026-10-19 10:12:37.418205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5f2a9c7d1e63'
down_revision: Union[str, Sequence[str], None] = '8d41b6e0c2f9'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


courses = sa.table(
    "courses",
    sa.column("id", sa.Integer()),
    sa.column("tags", sa.JSON()),
)
course_tags = sa.table(
    "course_tags",
    sa.column("id", sa.Integer()),
    sa.column("course_id", sa.Integer()),
    sa.column("name", sa.String()),
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "course_tags",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.UniqueConstraint("course_id", "name", name="uq_course_tags_course_name"),
    )
    op.create_index("ix_course_tags_id", "course_tags", ["id"])
    op.create_index("ix_course_tags_course_id", "course_tags", ["course_id"])

    conn = op.get_bind()
    rows = []
    for course_id, tags in conn.execute(sa.select(courses.c.id, courses.c.tags)):
        for name in dict.fromkeys(tags or []):
            rows.append({"course_id": course_id, "name": name})
    if rows:
        op.bulk_insert(course_tags, rows)

    with op.batch_alter_table("courses") as batch_op:
        batch_op.drop_column("tags")


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("courses") as batch_op:
        batch_op.add_column(sa.Column("tags", sa.JSON(), nullable=True))

    conn = op.get_bind()
    grouped: dict[int, list[str]] = {}
    for course_id, name in conn.execute(
        sa.select(course_tags.c.course_id, course_tags.c.name).order_by(course_tags.c.id)
    ):
        grouped.setdefault(course_id, []).append(name)
    for course_id, names in grouped.items():
        conn.execute(courses.update().where(courses.c.id == course_id).values(tags=names))
    conn.execute(courses.update().where(courses.c.tags.is_(None)).values(tags=[]))

    with op.batch_alter_table("courses") as batch_op:
        batch_op.alter_column("tags", existing_type=sa.JSON(), nullable=False)

    op.drop_index("ix_course_tags_course_id", table_name="course_tags")
    op.drop_index("ix_course_tags_id", table_name="course_tags")
    op.drop_table("course_tags")
