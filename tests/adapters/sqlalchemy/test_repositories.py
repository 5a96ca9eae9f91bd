from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import pytest

from sitetrack.adapters.sqlalchemy.repositories import SqlAlchemyTrackedEntityRepository
from sitetrack.domain.model import EntityFamily, JobStatus
from sitetrack.domain.reconciliation import EntityDraft, StoreWriteError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


@pytest.fixture
def repository(sqlite_session: Session) -> SqlAlchemyTrackedEntityRepository:
    return SqlAlchemyTrackedEntityRepository(sqlite_session)


def _insert_job(repository: SqlAlchemyTrackedEntityRepository, **values: object) -> UUID:
    draft_values: dict[str, object] = {
        "name": "Oak St Tower",
        "address": "1 Main St",
        "status": JobStatus.PLANNING,
    }
    draft_values.update(values)
    return repository.insert(EntityDraft(family=EntityFamily.JOB, values=draft_values))


def test_insert_stamps_keys_and_timestamps(repository: SqlAlchemyTrackedEntityRepository) -> None:
    entity_id = _insert_job(repository, external_id="DGE-100")

    stored = repository.get(entity_id)

    assert stored is not None
    assert stored.dedupe_key == "oak st tower|1 main st"
    assert stored.name_key == "oak st tower"
    assert stored.created_at is not None
    assert stored.last_imported_at == stored.created_at


def test_lookups_are_scoped_to_one_family(repository: SqlAlchemyTrackedEntityRepository) -> None:
    job_id = _insert_job(repository, external_id="X-1")
    repository.insert(
        EntityDraft(
            family=EntityFamily.OFFICE,
            values={"name": "Oak St Tower", "address": "1 Main St", "external_id": "X-1"},
        )
    )

    by_external_id = repository.find_by_external_id(EntityFamily.JOB, "X-1")
    by_key = repository.find_by_natural_key(EntityFamily.JOB, "oak st tower|1 main st")

    assert [entity.id for entity in by_external_id] == [job_id]
    assert [entity.id for entity in by_key] == [job_id]
    assert repository.find_by_external_id(EntityFamily.JOB, "X-2") == ()


def test_fuzzy_lookup_uses_the_value_spread(repository: SqlAlchemyTrackedEntityRepository) -> None:
    near_id = _insert_job(repository, value=Decimal("5000000"))
    _insert_job(repository, address="2 Main St", value=Decimal("9000000"))
    _insert_job(repository, address="3 Main St")

    hits = repository.find_by_fuzzy_value(
        EntityFamily.JOB, "oak st tower", Decimal("5050000"), 0.02
    )

    assert [entity.id for entity in hits] == [near_id]


def test_apply_diff_updates_values_and_keys(repository: SqlAlchemyTrackedEntityRepository) -> None:
    entity_id = _insert_job(repository)

    repository.apply_diff(entity_id, {"address": "9 Elm St", "status": JobStatus.ACTIVE})

    stored = repository.get(entity_id)
    assert stored is not None
    assert stored.status is JobStatus.ACTIVE
    assert stored.dedupe_key == "oak st tower|9 elm st"
    assert repository.find_by_natural_key(EntityFamily.JOB, "oak st tower|9 elm st")


def test_apply_diff_on_a_missing_entity_fails(
    repository: SqlAlchemyTrackedEntityRepository,
) -> None:
    with pytest.raises(StoreWriteError, match="no longer exists"):
        repository.apply_diff(uuid4(), {"status": JobStatus.ACTIVE})


def test_user_edit_locks_fields_until_unlocked(
    repository: SqlAlchemyTrackedEntityRepository,
) -> None:
    entity_id = _insert_job(repository, contractor="Acme")

    edited = repository.record_user_edit(
        entity_id,
        {"contractor": "Hand Picked Co", "user_notes": "met on site", "name": "Oak Street Tower"},
    )

    assert edited.locked_fields == {"contractor", "name"}
    assert edited.user_notes == "met on site"
    assert edited.name_key == "oak street tower"
    assert repository.unlock_fields(entity_id, ["name"]) == {"contractor"}
    assert repository.unlock_fields(entity_id) == set()


def test_user_edit_of_unknown_entity_raises(
    repository: SqlAlchemyTrackedEntityRepository,
) -> None:
    with pytest.raises(LookupError):
        repository.record_user_edit(uuid4(), {"user_notes": "x"})
