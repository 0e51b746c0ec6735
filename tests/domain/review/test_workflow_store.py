from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from pricewatch.domain.errors import (
    DuplicatePendingWorkflowError,
    NotFoundError,
    StateConflictError,
    UnsupportedWorkflowTypeError,
    ValidationError,
)
from pricewatch.domain.model import (
    ChangeType,
    EntityType,
    Source,
    SourceType,
    WorkflowStatus,
    new_id,
)
from pricewatch.domain.review import WorkflowStore
from tests.helpers.catalog import make_catalog, seed_repositories
from tests.support.fakes import make_repositories

if TYPE_CHECKING:
    from pricewatch.domain.ports import PricewatchRepositories

NOW = datetime(2024, 3, 5, 12, tzinfo=UTC)


@pytest.fixture
def repositories() -> PricewatchRepositories:
    return make_repositories()


@pytest.fixture
def store(repositories: PricewatchRepositories) -> WorkflowStore:
    return WorkflowStore(repositories, clock=lambda: NOW)


def _price_change(repositories: PricewatchRepositories, **overrides: object) -> dict[str, object]:
    catalog = seed_repositories(repositories, make_catalog())
    source = Source(name="Market", type=SourceType.MARKET)
    repositories.sources.add(source)
    data: dict[str, object] = {
        "commodityId": str(catalog.commodity.id),
        "cityId": str(catalog.city.id),
        "sourceId": str(source.id),
        "priceValue": "1200",
        "priceCurrency": "KES",
        "priceUnit": "kg",
        "observedAt": "2024-03-05T10:00:00Z",
    }
    data.update(overrides)
    return data


def test_create_stores_a_pending_workflow_with_normalized_snapshot(
    repositories: PricewatchRepositories, store: WorkflowStore
) -> None:
    entity_id = new_id()
    requester = new_id()

    workflow = store.create(
        entity_type="PRICE_OBSERVATION",
        entity_id=entity_id,
        change_type="CREATE",
        change_data=_price_change(repositories),
        requester_id=requester,
    )

    assert workflow.status is WorkflowStatus.PENDING
    assert workflow.entity_type is EntityType.PRICE_OBSERVATION
    assert workflow.entity_id == entity_id
    assert workflow.requester_id == requester
    assert workflow.requested_at == NOW
    assert workflow.change_data["observedAt"] == "2024-03-05T10:00:00+00:00"
    assert workflow.pending_key is not None
    assert repositories.workflows.get(workflow.id) is workflow


def test_create_refuses_unknown_or_unsupported_types(store: WorkflowStore) -> None:
    with pytest.raises(ValidationError, match="Invalid entity type"):
        store.create(
            entity_type="SPACESHIP",
            entity_id=new_id(),
            change_type=ChangeType.CREATE,
            change_data={},
            requester_id=new_id(),
        )
    with pytest.raises(UnsupportedWorkflowTypeError):
        store.create(
            entity_type=EntityType.CITY,
            entity_id=new_id(),
            change_type=ChangeType.DELETE,
            change_data={},
            requester_id=new_id(),
        )


def test_commodity_updates_must_name_a_known_commodity(
    repositories: PricewatchRepositories, store: WorkflowStore
) -> None:
    missing = new_id()

    with pytest.raises(NotFoundError, match=f"Commodity not found: {missing}"):
        store.create(
            entity_type=EntityType.COMMODITY,
            entity_id=missing,
            change_type=ChangeType.UPDATE,
            change_data={"brand": "Acme"},
            requester_id=new_id(),
        )

    assert repositories.workflows.items == []  # type: ignore[attr-defined]


def test_create_propagates_pending_key_conflicts(
    repositories: PricewatchRepositories, store: WorkflowStore
) -> None:
    data = _price_change(repositories)
    store.create(
        entity_type=EntityType.PRICE_OBSERVATION,
        entity_id=new_id(),
        change_type=ChangeType.CREATE,
        change_data=data,
        requester_id=new_id(),
    )

    with pytest.raises(DuplicatePendingWorkflowError):
        store.create(
            entity_type=EntityType.PRICE_OBSERVATION,
            entity_id=new_id(),
            change_type=ChangeType.CREATE,
            change_data={**data, "priceValue": "1200.00"},
            requester_id=new_id(),
        )


def test_reject_is_terminal_and_writes_nothing_else(
    repositories: PricewatchRepositories, store: WorkflowStore
) -> None:
    workflow = store.create(
        entity_type=EntityType.PRICE_OBSERVATION,
        entity_id=new_id(),
        change_type=ChangeType.CREATE,
        change_data=_price_change(repositories, brand="AcmeMaize"),
        requester_id=new_id(),
    )
    reviewer = new_id()

    rejected = store.reject(workflow.id, reviewer_id=reviewer)

    assert rejected.status is WorkflowStatus.REJECTED
    assert rejected.reviewer_id == reviewer
    assert rejected.reviewed_at == NOW
    assert rejected.pending_key is None
    assert repositories.observations.get(workflow.entity_id) is None
    assert repositories.brands.find_by_name("AcmeMaize") is None

    with pytest.raises(StateConflictError, match="not pending"):
        store.approve(workflow.id, reviewer_id=reviewer)
    with pytest.raises(StateConflictError, match="not pending"):
        store.reject(workflow.id, reviewer_id=reviewer)


def test_approve_twice_commits_one_observation(
    repositories: PricewatchRepositories, store: WorkflowStore
) -> None:
    workflow = store.create(
        entity_type=EntityType.PRICE_OBSERVATION,
        entity_id=new_id(),
        change_type=ChangeType.CREATE,
        change_data=_price_change(repositories),
        requester_id=new_id(),
    )

    store.approve(workflow.id, reviewer_id=new_id())
    with pytest.raises(StateConflictError):
        store.approve(workflow.id, reviewer_id=new_id())

    assert repositories.observations.get(workflow.entity_id) is not None
    assert workflow.status is WorkflowStatus.APPROVED


def test_transition_to_pending_is_not_allowed(store: WorkflowStore) -> None:
    with pytest.raises(ValidationError, match="APPROVED or REJECTED"):
        store.transition(new_id(), WorkflowStatus.PENDING, reviewer_id=new_id())


def test_unknown_workflow_is_not_found(store: WorkflowStore) -> None:
    with pytest.raises(NotFoundError, match="Workflow not found"):
        store.approve(new_id(), reviewer_id=new_id())


def test_bad_override_leaves_workflow_pending(
    repositories: PricewatchRepositories, store: WorkflowStore
) -> None:
    workflow = store.create(
        entity_type=EntityType.PRICE_OBSERVATION,
        entity_id=new_id(),
        change_type=ChangeType.CREATE,
        change_data=_price_change(repositories),
        requester_id=new_id(),
    )

    with pytest.raises(ValidationError, match="Invalid price"):
        store.approve(workflow.id, reviewer_id=new_id(), overrides={"priceValue": "-3"})

    assert workflow.status is WorkflowStatus.PENDING
    assert repositories.observations.get(workflow.entity_id) is None
