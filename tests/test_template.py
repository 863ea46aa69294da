import pytest

from kudokit.template import parse_kubernetes_objects

POD = """apiVersion: v1
kind: Pod
metadata:
  name: hello
"""

SERVICE = """apiVersion: v1
kind: Service
metadata:
  name: svc
"""


def test_parses_multiple_documents_in_order():
    objs = parse_kubernetes_objects(POD + "---\n" + SERVICE)
    assert [o["kind"] for o in objs] == ["Pod", "Service"]
    assert objs[0]["metadata"]["name"] == "hello"
    assert objs[1]["metadata"]["name"] == "svc"


def test_empty_parts_are_skipped():
    objs = parse_kubernetes_objects("---\n" + POD + "---")
    assert len(objs) == 1
    assert objs[0]["apiVersion"] == "v1"


def test_empty_text_gives_no_objects():
    assert parse_kubernetes_objects("") == []


def test_missing_kind_raises():
    with pytest.raises(ValueError, match="'kind' is missing"):
        parse_kubernetes_objects("apiVersion: v1\nmetadata: {}\n")


def test_invalid_yaml_raises():
    with pytest.raises(ValueError, match="invalid YAML"):
        parse_kubernetes_objects("kind: [unclosed\n")


def test_non_mapping_raises():
    with pytest.raises(ValueError, match="not a Kubernetes object"):
        parse_kubernetes_objects("- a\n- b\n")