import json
import os
import sys

import pytest

from tinyrbac.core.errors import PolicyDecodeError
from tinyrbac.store.file_store import FilePolicySource


def test_etag_changes_with_content(tmp_path):
    path = tmp_path / "a.json"
    path.write_text('{"resources": ["a"]}', encoding="utf-8")

    src = FilePolicySource(str(path))
    et1 = src.etag()
    assert et1 and src.etag() == et1

    path.write_text('{"resources": ["bb"]}', encoding="utf-8")
    assert src.etag() != et1


def test_etag_follows_replaced_file(tmp_path):
    path = tmp_path / "a.json"
    path.write_text('{"resources": ["a"]}', encoding="utf-8")
    src = FilePolicySource(str(path))
    et1 = src.etag()

    staged = tmp_path / "staged.json"
    staged.write_text('{"resources": ["b"]}', encoding="utf-8")
    os.replace(staged, path)
    assert src.etag() != et1


def test_etag_none_when_missing(tmp_path):
    src = FilePolicySource(str(tmp_path / "missing.json"))
    assert src.etag() is None


def test_etag_with_mtime(tmp_path):
    path = tmp_path / "a.json"
    path.write_text("{}", encoding="utf-8")
    src = FilePolicySource(str(path), include_mtime_in_etag=True)
    et1 = src.etag()
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 10_000_000))
    et2 = src.etag()
    assert et1 != et2
    assert et1.split(":")[0] == et2.split(":")[0]


def test_load_json_and_yaml(tmp_path, sample_document, sample_yaml):
    j = tmp_path / "p.json"
    j.write_text(json.dumps(sample_document), encoding="utf-8")
    assert FilePolicySource(str(j)).load() == sample_document

    pytest.importorskip("yaml")
    y = tmp_path / "p.yaml"
    y.write_text(sample_yaml, encoding="utf-8")
    assert FilePolicySource(str(y)).load()["resources"] == ["instances", "applications", "audit-logs"]


def test_yaml_without_pyyaml_raises(tmp_path, monkeypatch):
    monkeypatch.setitem(sys.modules, "yaml", None)
    p = tmp_path / "policy.yaml"
    p.write_text("resources: []\n", encoding="utf-8")
    with pytest.raises(ImportError):
        FilePolicySource(str(p)).load()


def test_load_with_schema_validation(tmp_path, sample_document):
    jsonschema = pytest.importorskip("jsonschema")
    good = tmp_path / "good.json"
    good.write_text(json.dumps(sample_document), encoding="utf-8")
    assert FilePolicySource(str(good), validate_schema=True).load() == sample_document

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"resources": "instances"}), encoding="utf-8")
    with pytest.raises(jsonschema.ValidationError):
        FilePolicySource(str(bad), validate_schema=True).load()


def test_load_missing_file_raises_decode_error(tmp_path):
    path = tmp_path / "gone.json"
    with pytest.raises(PolicyDecodeError) as e:
        FilePolicySource(str(path)).load()
    assert str(e.value).startswith("open json config")
    assert e.value.path == str(path)
    assert isinstance(e.value.__cause__, FileNotFoundError)


def test_load_malformed_document_raises_decode_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(PolicyDecodeError) as e:
        FilePolicySource(str(path)).load()
    assert str(e.value).startswith("unmarshal json config")
    assert e.value.filetype == "json"


def test_load_honours_explicit_format(tmp_path):
    pytest.importorskip("yaml")
    path = tmp_path / "policy.txt"
    path.write_text("resources: [instances]\n", encoding="utf-8")
    assert FilePolicySource(str(path), fmt="yaml").load() == {"resources": ["instances"]}
