"""create_trip_tables

Revision ID: 4b1f0c2e9a7d
Revises: 
Create Date: 2026-10-19 09:12:44.318204

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '4b1f0c2e9a7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_CHILD_KEY = """
    user_id VARCHAR(255) NOT NULL,
    trip_id VARCHAR(255) NOT NULL,
    id VARCHAR(255) NOT NULL,
"""

_CHILD_CONSTRAINTS = """
    PRIMARY KEY (user_id, trip_id, id),
    FOREIGN KEY (user_id, trip_id) REFERENCES trips (user_id, id) ON DELETE CASCADE
"""


def upgrade() -> None:
    """Upgrade schema."""
    op.execute("""
        CREATE TABLE trips (
            user_id VARCHAR(255) NOT NULL,
            id VARCHAR(255) NOT NULL,
            trip_name VARCHAR(100) NOT NULL,
            trip_type VARCHAR(32),
            start_date VARCHAR(10),
            end_date VARCHAR(10),
            location TEXT,
            description TEXT,
            data JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (user_id, id),
            CONSTRAINT chk_trips_trip_type
                CHECK (trip_type IN ('car camping', 'canoe camping', 'hike camping', 'cottage'))
        )
    """)

    op.execute(f"""
        CREATE TABLE groups ({_CHILD_KEY}
            name VARCHAR(100),
            size INTEGER,
            contact_name TEXT,
            contact_email TEXT,
            color VARCHAR(7),{_CHILD_CONSTRAINTS})
    """)

    op.execute(f"""
        CREATE TABLE packing_items ({_CHILD_KEY}
            name VARCHAR(100) NOT NULL DEFAULT '',
            category VARCHAR(100) NOT NULL DEFAULT 'Other',
            quantity INTEGER NOT NULL DEFAULT 1,
            weight DOUBLE PRECISION,
            is_owned BOOLEAN NOT NULL DEFAULT false,
            needs_to_buy BOOLEAN NOT NULL DEFAULT false,
            is_packed BOOLEAN NOT NULL DEFAULT false,
            required BOOLEAN NOT NULL DEFAULT false,
            assigned_group_id VARCHAR(255),
            is_personal BOOLEAN NOT NULL DEFAULT false,
            packed_by_user_id VARCHAR(255),
            last_modified_by VARCHAR(255),
            last_modified_at TIMESTAMPTZ,
            notes TEXT,
            created_at TIMESTAMPTZ,
            updated_at TIMESTAMPTZ,{_CHILD_CONSTRAINTS})
    """)

    op.execute(f"""
        CREATE TABLE meals ({_CHILD_KEY}
            name VARCHAR(100) NOT NULL DEFAULT '',
            day INTEGER NOT NULL DEFAULT 1,
            type VARCHAR(20) NOT NULL DEFAULT 'dinner',
            ingredients JSONB NOT NULL DEFAULT '[]'::jsonb,
            is_custom BOOLEAN NOT NULL DEFAULT false,
            assigned_group_id VARCHAR(255),
            shared_servings BOOLEAN NOT NULL DEFAULT true,
            servings INTEGER NOT NULL DEFAULT 1,
            last_modified_by VARCHAR(255),
            last_modified_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ,
            updated_at TIMESTAMPTZ,{_CHILD_CONSTRAINTS})
    """)

    op.execute(f"""
        CREATE TABLE shopping_items ({_CHILD_KEY}
            name VARCHAR(100),
            quantity INTEGER,
            category VARCHAR(20),
            is_owned BOOLEAN,
            needs_to_buy BOOLEAN,
            source_item_id VARCHAR(255),
            assigned_group_id VARCHAR(255),
            cost DOUBLE PRECISION,
            paid_by_group_id VARCHAR(255),
            paid_by_user_name TEXT,
            splits JSONB,{_CHILD_CONSTRAINTS})
    """)

    op.execute(f"""
        CREATE TABLE todo_items ({_CHILD_KEY}
            text TEXT,
            is_completed BOOLEAN,
            display_order INTEGER,
            created_at TEXT,
            updated_at TEXT,{_CHILD_CONSTRAINTS})
    """)

    op.execute(f"""
        CREATE TABLE deleted_ingredients ({_CHILD_KEY}
            ingredient_name TEXT NOT NULL,{_CHILD_CONSTRAINTS})
    """)


def downgrade() -> None:
    """Downgrade schema."""
    for table in ("deleted_ingredients", "todo_items", "shopping_items", "meals", "packing_items", "groups"):
        op.execute(f"DROP TABLE IF EXISTS {table}")
    op.execute("DROP TABLE IF EXISTS trips")
