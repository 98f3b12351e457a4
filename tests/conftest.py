import copy

import pytest

from tinyrbac.core.builder import build_from_policy
from tinyrbac.store.policy_loader import decode_policy

ALL = ["GET", "POST", "PUT", "PATCH", "DELETE"]

SAMPLE_DOCUMENT = {
    "description": "sample",
    "resources": ["instances", "applications", "audit-logs"],
    "roles": [
        {"name": "Admin", "resources": [{"name": "*", "actions": ALL}]},
        {
            "name": "Instance Manager",
            "resources": [
                {"name": "instances", "actions": ALL},
                {"name": "audit-logs", "actions": [""]},
            ],
        },
        {
            "name": "Auditor",
            "resources": [
                {"name": "applications", "actions": ["GET"]},
                {"name": "audit-logs", "actions": ["GET"]},
            ],
        },
    ],
}

SAMPLE_YAML = """
resources:
- "instances"
- "applications"
- "audit-logs"
roles:
  - name: Admin
    resources:
      - name: "*"
        actions: [GET, POST, PUT, PATCH, DELETE]
  - name: Instance Manager
    resources:
      - name: instances
        actions: [GET, POST, PUT, PATCH, DELETE]
  - name: Auditor
    resources:
      - name: applications
        actions: [GET]
      - name: audit-logs
        actions: [GET]
"""


@pytest.fixture
def sample_document():
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
def sample_policy(sample_document):
    return decode_policy(sample_document)


@pytest.fixture
def sample_model(sample_policy):
    return build_from_policy(sample_policy)


@pytest.fixture
def sample_yaml():
    return SAMPLE_YAML
