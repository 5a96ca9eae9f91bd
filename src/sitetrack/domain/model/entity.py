"""Identity shared by everything the store tracks."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Base for stored records.

    The id is assigned on construction, so a freshly inserted entity can be
    reported before the session flushes. Equality is identity.
    """

    id: UUID = field(default_factory=new_id)
