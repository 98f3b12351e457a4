from __future__ import annotations

import logging
from typing import List, Tuple

from .constants import ALL_RESOURCES, MAX_ACTIONS, MAX_ROLES, WILDCARD, action_offset
from .errors import BuildError, PolicyValidationError
from .indexer import assign_indices
from .model import AccessModel, Policy
from .validator import validate_policy

logger = logging.getLogger("tinyrbac.core")

# Matrix layout for roles r1..rN, resources R1..R3 and actions A1..A5:
#
#   role      ---------------------r1---------------------  r2 ...
#   action    --A1--  --A2--  --A3--  --A4--  --A5--
#   resource  R3R2R1  R3R2R1  R3R2R1  R3R2R1  R3R2R1
#   bits      [1 1 0] [1 0 0] [0 0 0] [0 0 0] [1 1 1]
#
# r1 may A1 on R2 and R3, A2 on R3 only, never A3/A4, and A5 on everything.


def build_matrix(
    policy: Policy,
    role_index: Tuple[str, ...],
    resource_index: Tuple[str, ...],
) -> Tuple[int, ...]:
    """Pack the role x action x resource relation of a validated policy into bitsets.

    Wildcard grants set every bit of the cell (ALL_RESOURCES), covering every
    representable resource slot. Concrete grants OR in a single bit, so repeated
    or reordered grants never change the result. Blank actions are skipped, and a
    grant with nothing but blank actions contributes nothing.
    """
    matrix: List[int] = [0] * (MAX_ROLES * MAX_ACTIONS)

    for role in policy.roles:
        base = role_index.index(role.name) * MAX_ACTIONS
        for grant in role.resource_grants:
            offsets = []
            for action in grant.actions:
                if not action:
                    logger.debug("tinyrbac: ignoring blank action for role %s", role.name)
                    continue
                offset = action_offset(action)
                if offset is None:
                    # validate_policy rejects these; never alias to another action
                    raise BuildError(f"unknown action: {action} for role {role.name}")
                offsets.append(offset)
            if not offsets:
                continue

            if grant.resource_name == WILDCARD:
                for offset in offsets:
                    matrix[base + offset] = ALL_RESOURCES
            else:
                bit = 1 << resource_index.index(grant.resource_name)
                for offset in offsets:
                    matrix[base + offset] |= bit

    return tuple(matrix)


def build_from_policy(policy: Policy) -> AccessModel:
    """Validate *policy* and build its AccessModel.

    Raises:
        BuildError: wrapping the PolicyValidationError that failed the build
            (also chained as ``__cause__``), or DuplicateRoleError.
    """
    try:
        validate_policy(policy)
    except PolicyValidationError as e:
        raise BuildError(f"validate config: {e}", cause=e) from e

    role_index, resource_index = assign_indices(policy)
    matrix = build_matrix(policy, role_index, resource_index)
    model = AccessModel(
        role_index=role_index,
        resource_index=resource_index,
        matrix=matrix,
        role_count=len(policy.roles),
        resource_count=sum(1 for name in resource_index if name),
        description=policy.description,
    )
    logger.info(
        "tinyrbac: access model built (%d roles, %d resources)",
        model.role_count,
        model.resource_count,
    )
    return model


__all__ = ["build_matrix", "build_from_policy"]
