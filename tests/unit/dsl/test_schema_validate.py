import builtins
import sys
import types

import pytest

from tinyrbac.dsl.validate import POLICY_SCHEMA, schema_errors, validate_document


def test_validate_document_with_fake_jsonschema(sample_document, monkeypatch):
    fake = types.SimpleNamespace()
    called = {}

    def fake_validate(instance, schema):
        called["ok"] = True
        assert schema is POLICY_SCHEMA
        assert instance == sample_document

    fake.validate = fake_validate
    monkeypatch.setitem(sys.modules, "jsonschema", fake)
    validate_document(sample_document)
    assert called.get("ok") is True


def test_validate_document_raises_when_jsonschema_missing(monkeypatch):
    real_import = builtins.__import__

    def raising_import(name, *a, **kw):
        if name == "jsonschema":
            raise ImportError("nope")
        return real_import(name, *a, **kw)

    monkeypatch.setattr(builtins, "__import__", raising_import)
    with pytest.raises(RuntimeError) as e:
        validate_document({})
    assert "tinyrbac[validate]" in str(e.value)


def test_schema_accepts_sample(sample_document):
    pytest.importorskip("jsonschema")
    validate_document(sample_document)
    assert schema_errors(sample_document) == []


def test_schema_errors_point_at_offending_entries():
    pytest.importorskip("jsonschema")
    doc = {
        "resources": ["a", 3],
        "roles": [{"name": "x", "resources": [{"actions": ["GET"]}]}],
    }
    errs = schema_errors(doc)
    paths = [e["path"] for e in errs]
    assert "resources/1" in paths
    assert "roles/0/resources/0" in paths
    assert all(e["message"] for e in errs)
