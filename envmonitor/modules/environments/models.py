# Table: environments
# Flat, single table; no relationships to other entities.
#
# - id: text (primary key), "env-<epoch millis>-<9 base36 chars>", assigned by the store
# - name: text (nullable)
# - url: text (not null) - IP address or URL, no format check
# - version: text (nullable)
# - status: text (not null) - working | degraded | down, checked at the API boundary
# - notes: text (nullable)
# - last_updated: datetime (not null) - UTC, refreshed on every create/update

import random
import string
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Tuple

from sqlalchemy import Column, DateTime, MetaData, Table, Text

EnvironmentStatus = Literal["working", "degraded", "down"]
ENVIRONMENT_STATUSES: Tuple[str, ...] = ("working", "degraded", "down")

# Fields a caller may set; id and last_updated belong to the store.
EDITABLE_FIELDS: Tuple[str, ...] = ("name", "url", "version", "status", "notes")

_ID_ALPHABET = string.ascii_lowercase + string.digits

metadata = MetaData()

environments_table = Table(
    "environments",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=True),
    Column("url", Text, nullable=False),
    Column("version", Text, nullable=True),
    Column("status", Text, nullable=False),
    Column("notes", Text, nullable=True),
    Column("last_updated", DateTime, nullable=False),
)


@dataclass
class EnvironmentRecord:
    id: str
    url: str
    status: str
    last_updated: datetime
    name: Optional[str] = None
    version: Optional[str] = None
    notes: Optional[str] = None


def generate_environment_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"env-{int(time.time() * 1000)}-{suffix}"
