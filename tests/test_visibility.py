"""Mini README: Tests for role-based visibility filtering."""

from __future__ import annotations

import pytest

from gramchain.ledger import Role, Viewer, visible_projects, visible_transactions
from gramchain.ledger.visibility import can_allocate_funds, can_create_projects


def test_contractor_sees_only_their_projects(mutator) -> None:
    project_a = mutator.add_project(name="Alpha", total_budget=1, contractor="A")
    mutator.add_project(name="Beta", total_budget=1, contractor="B")
    projects = mutator.list_projects()

    assert visible_projects(projects, Viewer(Role.CONTRACTOR, "A")) == [project_a]
    assert len(visible_projects(projects, Viewer(Role.GOVERNMENT, "A"))) == 2


def test_contractor_match_is_case_sensitive(mutator) -> None:
    mutator.add_project(name="Alpha", total_budget=1, contractor="GreenSpace Contractors")
    viewer = Viewer(Role.CONTRACTOR, "greenspace contractors")
    assert visible_projects(mutator.list_projects(), viewer) == []


@pytest.mark.parametrize("role", [Role.GOVERNMENT, Role.LOCAL_AUTHORITY, Role.PUBLIC])
def test_non_contractor_roles_see_all_projects(mutator, role) -> None:
    mutator.add_project(name="Alpha", total_budget=1, contractor="A")
    mutator.add_project(name="Unassigned", total_budget=1)
    assert len(visible_projects(mutator.list_projects(), Viewer(role, "someone"))) == 2


def test_transaction_visibility_by_role(mutator) -> None:
    to_council = mutator.add_transaction(
        sender="Government Treasury", recipient="Council North", amount=5, transaction_type="allocation"
    )
    from_council = mutator.add_transaction(
        sender="Council North", recipient="Urban Development Co", amount=3, transaction_type="payment"
    )
    mutator.add_transaction(
        sender="Government Treasury", recipient="Council South", amount=1, transaction_type="allocation"
    )
    transactions = mutator.list_transactions()

    assert len(visible_transactions(transactions, Viewer(Role.PUBLIC, ""))) == 3
    assert len(visible_transactions(transactions, Viewer(Role.GOVERNMENT, "Minister"))) == 3
    assert visible_transactions(transactions, Viewer(Role.LOCAL_AUTHORITY, "Council North")) == [
        to_council,
        from_council,
    ]
    assert visible_transactions(transactions, Viewer(Role.CONTRACTOR, "Urban Development Co")) == [
        from_council
    ]


def test_role_parsing_and_gating() -> None:
    assert Role.from_str(" Local_Authority ") is Role.LOCAL_AUTHORITY
    with pytest.raises(ValueError):
        Role.from_str("admin")

    assert can_create_projects(Role.GOVERNMENT)
    assert not can_create_projects(Role.LOCAL_AUTHORITY)
    assert can_allocate_funds(Role.LOCAL_AUTHORITY)
    assert not can_allocate_funds(Role.PUBLIC)
