import pytest

from tinyrbac.core.constants import MAX_RESOURCES, MAX_ROLES
from tinyrbac.core.errors import DuplicateRoleError
from tinyrbac.core.indexer import assign_indices
from tinyrbac.core.model import Policy, ResourceGrant, Role


def test_indices_are_sorted_and_padded(sample_policy):
    roles, resources = assign_indices(sample_policy)
    assert len(roles) == MAX_ROLES and len(resources) == MAX_RESOURCES
    assert roles[:3] == ("Admin", "Auditor", "Instance Manager")
    assert resources[:3] == ("applications", "audit-logs", "instances")
    assert set(roles[3:]) == {""} and set(resources[3:]) == {""}


def test_resources_are_deduplicated_without_blanks():
    pol = Policy(resources=("b", "", "a", "b"), roles=(Role("x", "", (ResourceGrant("a", ("GET",)),)),))
    _, resources = assign_indices(pol)
    assert resources[:2] == ("a", "b")
    assert resources[2] == ""


def test_order_is_code_point_order():
    pol = Policy(
        resources=("b", "B", "a", "_"),
        roles=tuple(Role(n, "", (ResourceGrant("a", ("GET",)),)) for n in ("zeta", "Zeta", "alpha")),
    )
    roles, resources = assign_indices(pol)
    assert roles[:3] == ("Zeta", "alpha", "zeta")
    assert resources[:4] == ("B", "_", "a", "b")


def test_declaration_order_does_not_matter(sample_policy):
    shuffled = Policy(
        resources=tuple(reversed(sample_policy.resources)),
        roles=tuple(reversed(sample_policy.roles)),
    )
    assert assign_indices(shuffled) == assign_indices(sample_policy)


def test_duplicate_role_names_are_rejected():
    grant = (ResourceGrant("a", ("GET",)),)
    pol = Policy(resources=("a",), roles=(Role("x", "", grant), Role("x", "", grant)))
    with pytest.raises(DuplicateRoleError) as e:
        assign_indices(pol)
    assert e.value.role_name == "x"
