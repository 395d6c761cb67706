"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00.000000

Initial schema: users, leagues, memberships, events, fighters, fights, picks.
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables from scratch."""
    from fightpicks.database.db import Base
    from fightpicks.database import models  # noqa: F401

    bind = op.get_bind()
    Base.metadata.create_all(bind=bind, checkfirst=True)


def downgrade() -> None:
    """Drop all tables."""
    from fightpicks.database.db import Base
    from fightpicks.database import models  # noqa: F401

    bind = op.get_bind()
    Base.metadata.drop_all(bind=bind, checkfirst=True)
