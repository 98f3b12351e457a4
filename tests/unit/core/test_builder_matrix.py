import logging

import pytest

from tinyrbac.core.builder import build_from_policy, build_matrix
from tinyrbac.core.constants import ALL_RESOURCES, MAX_ACTIONS, MAX_ROLES
from tinyrbac.core.errors import (
    BuildError,
    DuplicateRoleError,
    NoResourcesError,
    UndefinedResourceError,
)
from tinyrbac.core.indexer import assign_indices
from tinyrbac.core.model import Policy, ResourceGrant, Role

A = ALL_RESOURCES


def test_sample_matrix(sample_model):
    assert len(sample_model.matrix) == MAX_ROLES * MAX_ACTIONS
    # Admin (wildcard), Auditor (GET on applications + audit-logs), Instance Manager (all on instances)
    assert sample_model.matrix[:15] == (A, A, A, A, A, 3, 0, 0, 0, 0, 4, 4, 4, 4, 4)
    assert set(sample_model.matrix[15:]) == {0}
    assert sample_model.role_count == 3
    assert sample_model.resource_count == 3
    assert sample_model.description == "sample"


def test_grants_accumulate_and_are_idempotent():
    pol = Policy(
        resources=("a", "b", "c"),
        roles=(
            Role(
                "r",
                "",
                (
                    ResourceGrant("c", ("GET",)),
                    ResourceGrant("a", ("GET", "GET")),
                    ResourceGrant("c", ("GET", "DELETE")),
                ),
            ),
        ),
    )
    roles, resources = assign_indices(pol)
    matrix = build_matrix(pol, roles, resources)
    assert matrix[0] == 0b101
    assert matrix[4] == 0b100

    reordered = Policy(resources=pol.resources, roles=(Role("r", "", tuple(reversed(pol.roles[0].resource_grants))),))
    assert build_matrix(reordered, roles, resources) == matrix


def test_wildcard_sets_every_bit_even_with_concrete_grants():
    pol = Policy(
        resources=("a",),
        roles=(Role("r", "", (ResourceGrant("a", ("POST",)), ResourceGrant("*", ("POST",)))),),
    )
    model = build_from_policy(pol)
    assert model.matrix[1] == ALL_RESOURCES
    assert model.matrix[0] == 0


def test_blank_only_grant_contributes_nothing(caplog):
    pol = Policy(
        resources=("a",),
        roles=(Role("r", "", (ResourceGrant("*", ("", "")), ResourceGrant("a", ("GET",)))),),
    )
    with caplog.at_level(logging.DEBUG, logger="tinyrbac.core"):
        model = build_from_policy(pol)
    assert model.matrix[:MAX_ACTIONS] == (1, 0, 0, 0, 0)
    assert any("blank action" in r.getMessage() for r in caplog.records)


def test_build_is_deterministic_across_declaration_order(sample_policy):
    shuffled = Policy(
        description=sample_policy.description,
        resources=tuple(reversed(sample_policy.resources)),
        roles=tuple(reversed(sample_policy.roles)),
    )
    assert build_from_policy(shuffled) == build_from_policy(sample_policy)


def test_validation_failure_wraps_cause():
    with pytest.raises(BuildError) as e:
        build_from_policy(Policy())
    assert str(e.value) == "validate config: no resources"
    assert isinstance(e.value.cause, NoResourcesError)
    assert isinstance(e.value.__cause__, NoResourcesError)


def test_undefined_resource_aborts_build():
    pol = Policy(resources=("a",), roles=(Role("r", "", (ResourceGrant("b", ("GET",)),)),))
    with pytest.raises(BuildError) as e:
        build_from_policy(pol)
    assert isinstance(e.value.cause, UndefinedResourceError)


def test_duplicate_roles_abort_build():
    grant = (ResourceGrant("a", ("GET",)),)
    pol = Policy(resources=("a",), roles=(Role("r", "", grant), Role("r", "", grant)))
    with pytest.raises(DuplicateRoleError):
        build_from_policy(pol)


def test_build_matrix_never_aliases_unknown_actions():
    pol = Policy(resources=("a",), roles=(Role("r", "", (ResourceGrant("a", ("FETCH",)),)),))
    roles, resources = assign_indices(pol)
    with pytest.raises(BuildError):
        build_matrix(pol, roles, resources)


def test_build_logs_summary(sample_policy, caplog):
    with caplog.at_level(logging.INFO, logger="tinyrbac.core"):
        build_from_policy(sample_policy)
    assert any("3 roles, 3 resources" in r.getMessage() for r in caplog.records)
