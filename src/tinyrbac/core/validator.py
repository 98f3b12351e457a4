from __future__ import annotations

import logging
from typing import FrozenSet, Iterable

from .constants import MAX_RESOURCES, MAX_ROLES, WILDCARD, action_offset
from .errors import (
    EmptyRoleNameError,
    EmptyRoleResourcesError,
    NoResourcesError,
    NoRolesError,
    TooManyResourcesError,
    TooManyRolesError,
    UndefinedResourceError,
    UnknownActionError,
)
from .model import Policy

logger = logging.getLogger("tinyrbac.core")


def unique_resources(names: Iterable[str]) -> FrozenSet[str]:
    """Deduplicate resource names, dropping blank entries."""
    return frozenset(name for name in names if name)


def validate_policy(policy: Policy) -> None:
    """Check a decoded policy before it is trusted.

    Checks run in a fixed order and the first failure is raised:

      1. at least one non-blank resource;
      2. no more than MAX_RESOURCES unique resources;
      3. at least one role;
      4. per role, in declaration order: a non-empty name, at least one grant,
         every concrete grant resource declared, every non-blank action known;
      5. no more than MAX_ROLES roles.

    Role names are expected to be unique already (the decoder collapses duplicates).
    """
    blanks = sum(1 for name in policy.resources if not name)
    if blanks:
        logger.debug("tinyrbac: ignoring %d blank resource name(s)", blanks)

    resources = unique_resources(policy.resources)
    if not resources:
        raise NoResourcesError()

    if len(resources) > MAX_RESOURCES:
        raise TooManyResourcesError(MAX_RESOURCES, len(resources))

    if not policy.roles:
        raise NoRolesError()

    for i, role in enumerate(policy.roles):
        if not role.name:
            raise EmptyRoleNameError(i if role.position is None else role.position)

        if not role.resource_grants:
            raise EmptyRoleResourcesError(role.name)

        for grant in role.resource_grants:
            if grant.resource_name != WILDCARD and grant.resource_name not in resources:
                raise UndefinedResourceError(grant.resource_name, role.name)
            for action in grant.actions:
                if action and action_offset(action) is None:
                    raise UnknownActionError(action, role.name)

    if len(policy.roles) > MAX_ROLES:
        raise TooManyRolesError(MAX_ROLES, len(policy.roles))


__all__ = ["validate_policy", "unique_resources"]
