import pytest

from kudokit.cluster import (
    AlreadyExistsError,
    InMemoryClientset,
    KudoClient,
    NotFoundError,
)
from kudokit.labels import OPERATOR_LABEL


def new_client():
    return KudoClient(InMemoryClientset())


def operator():
    return {
        "apiVersion": "kudo.dev/v1alpha1",
        "kind": "Operator",
        "metadata": {"labels": {"controller-tools.k8s.io": "1.0"}, "name": "test"},
    }


def instance(version_name="test-1.0", parameters=None):
    obj = {
        "apiVersion": "kudo.dev/v1alpha1",
        "kind": "Instance",
        "metadata": {
            "labels": {"controller-tools.k8s.io": "1.0", OPERATOR_LABEL: "test"},
            "name": "test",
        },
        "spec": {"operatorVersion": {"name": version_name}},
    }
    if parameters is not None:
        obj["spec"]["parameters"] = dict(parameters)
    return obj


def operator_version(name="test-1.0", version="1.0"):
    return {
        "apiVersion": "kudo.dev/v1alpha1",
        "kind": "OperatorVersion",
        "metadata": {"labels": {"controller-tools.k8s.io": "1.0"}, "name": name},
        "spec": {"version": version},
    }


@pytest.mark.parametrize(
    "expected,createns,getns,has_obj",
    [
        (False, "", "", False),
        (False, "default", "default", False),
        (True, "", "", True),
        (True, "default", "", True),
        (False, "", "kudo", True),
    ],
)
def test_operator_exists_in_cluster(expected, createns, getns, has_obj):
    client = new_client()
    if has_obj:
        client.clientset.create("operators", createns, operator())
    else:
        with pytest.raises(ValueError, match="object does not implement the Object interfaces"):
            client.clientset.create("operators", createns, None)
    assert client.operator_exists_in_cluster("test", getns) is expected


@pytest.mark.parametrize(
    "expected,namespace,instance_name,obj_version",
    [
        (False, "", "", None),
        (True, "testnamespace", "test", "test-1.0"),
        (False, "testnamespace", "nonexisting-instance-name", "test-1.0"),
        (False, "different-namespace", "test", "test-0.9"),
    ],
)
def test_instance_exists_in_cluster(expected, namespace, instance_name, obj_version):
    client = new_client()
    if obj_version is not None:
        client.clientset.create("instances", "testnamespace", instance(obj_version))
    assert client.instance_exists_in_cluster("test", namespace, "1.0", instance_name) is expected


def test_instance_exists_requires_matching_version():
    client = new_client()
    client.clientset.create("instances", "ns", instance("test-0.9"))
    assert client.instance_exists_in_cluster("test", "ns", "1.0", "test") is False


@pytest.mark.parametrize(
    "expected,namespace,has_obj",
    [([], "default", False), (["test"], "default", True), ([], "otherns", True)],
)
def test_list_instances(expected, namespace, has_obj):
    client = new_client()
    if has_obj:
        client.clientset.create("instances", "default", instance())
    assert client.list_instances(namespace) == expected


@pytest.mark.parametrize(
    "expected,namespace,has_obj",
    [([], "default", False), (["1.0"], "default", True), ([], "otherns", True)],
)
def test_operator_versions_installed(expected, namespace, has_obj):
    client = new_client()
    if has_obj:
        client.clientset.create("operatorversions", "default", operator_version())
    assert client.operator_versions_installed("test", namespace) == expected


INSTALL_CASES = [
    ("", "", False, False),
    ("", "default", False, False),
    ("", "kudo", False, False),
    ("test2", "kudo", True, False),
    ("test", "kudo", True, True),
]


def _install_case(resource, install, factory, name, createns, has_obj, found):
    client = new_client()
    obj = factory() if has_obj else None
    if obj is None:
        with pytest.raises(ValueError):
            client.clientset.create(resource, createns, obj)
        with pytest.raises(ValueError):
            getattr(client, install)(obj, createns)
    else:
        client.clientset.create(resource, createns, obj)
        with pytest.raises(AlreadyExistsError):
            getattr(client, install)(obj, createns)
    if found:
        assert client.clientset.get(resource, createns, name)["metadata"]["name"] == name
    else:
        with pytest.raises(NotFoundError) as info:
            client.clientset.get(resource, createns, name)
        assert str(info.value) == f'{resource}.kudo.dev "{name}" not found'


@pytest.mark.parametrize("name,createns,has_obj,found", INSTALL_CASES)
def test_install_operator_obj_to_cluster(name, createns, has_obj, found):
    _install_case(
        "operators", "install_operator_obj_to_cluster", operator, name, createns, has_obj, found
    )


@pytest.mark.parametrize("name,createns,has_obj,found", INSTALL_CASES)
def test_install_operator_version_obj_to_cluster(name, createns, has_obj, found):
    _install_case(
        "operatorversions",
        "install_operator_version_obj_to_cluster",
        lambda: operator_version(name="test"),
        name,
        createns,
        has_obj,
        found,
    )


@pytest.mark.parametrize("name,createns,has_obj,found", INSTALL_CASES)
def test_install_instance_obj_to_cluster(name, createns, has_obj, found):
    _install_case(
        "instances", "install_instance_obj_to_cluster", instance, name, createns, has_obj, found
    )


def test_install_returns_created_object():
    client = new_client()
    created = client.install_operator_obj_to_cluster(operator(), "kudo")
    assert created["metadata"] == {
        "labels": {"controller-tools.k8s.io": "1.0"},
        "name": "test",
        "namespace": "kudo",
    }


def test_install_duplicate_error_message():
    client = new_client()
    client.install_operator_obj_to_cluster(operator(), "kudo")
    with pytest.raises(AlreadyExistsError) as info:
        client.install_operator_obj_to_cluster(operator(), "kudo")
    assert str(info.value) == 'installing Operator: operators.kudo.dev "test" already exists'


@pytest.mark.parametrize(
    "found,namespace,has_obj",
    [(False, "default", False), (True, "default", True), (False, "otherns", True)],
)
def test_get_instance(found, namespace, has_obj):
    client = new_client()
    if has_obj:
        client.clientset.create("instances", "default", instance())
    actual = client.get_instance("test", namespace)
    assert (actual is not None) is found


@pytest.mark.parametrize(
    "found,namespace,has_obj",
    [(False, "default", False), (True, "default", True), (False, "otherns", True)],
)
def test_get_operator_version(found, namespace, has_obj):
    client = new_client()
    if has_obj:
        client.clientset.create("operatorversions", "default", operator_version())
    actual = client.get_operator_version("test-1.0", namespace)
    assert (actual is not None) is found


@pytest.mark.parametrize(
    "patch_to_version,existing,to_patch",
    [
        ("test-1.1.1", None, None),
        ("test-1.1.1", None, {"param": "value"}),
        ("test-1.1.1", {"param": "value"}, {"param": "value2"}),
        (None, {"param": "value"}, {"param": "value2"}),
        ("1.1.1", {"param": "value"}, {"other": "value2"}),
    ],
)
def test_update_instance(patch_to_version, existing, to_patch):
    client = new_client()
    client.clientset.create("instances", "default", instance(parameters=existing))

    client.update_instance("test", "default", patch_to_version, to_patch)
    updated = client.get_instance("test", "default")
    spec = updated["spec"]

    expected_version = patch_to_version if patch_to_version is not None else "test-1.0"
    assert spec["operatorVersion"]["name"] == expected_version

    parameters = spec.get("parameters") or {}
    for name, value in (to_patch or {}).items():
        assert parameters[name] == value
    for name, value in (existing or {}).items():
        if name not in (to_patch or {}):
            assert parameters[name] == value


def test_update_missing_instance_raises():
    client = new_client()
    with pytest.raises(NotFoundError):
        client.update_instance("missing", "default", "test-1.0", None)


def test_list_with_label_selector():
    clientset = InMemoryClientset()
    clientset.create("instances", "ns", instance())
    other = instance()
    other["metadata"]["name"] = "other"
    other["metadata"]["labels"] = {OPERATOR_LABEL: "kafka"}
    clientset.create("instances", "ns", other)
    names = [o["metadata"]["name"] for o in clientset.list("instances", "ns", f"{OPERATOR_LABEL}=kafka")]
    assert names == ["other"]
    names = [o["metadata"]["name"] for o in clientset.list("instances", "ns", f"{OPERATOR_LABEL}!=kafka")]
    assert names == ["test"]


def test_patch_merge_removes_null_keys():
    clientset = InMemoryClientset()
    clientset.create("instances", "ns", instance(parameters={"a": "1", "b": "2"}))
    result = clientset.patch("instances", "ns", "test", {"spec": {"parameters": {"a": None, "c": "3"}}})
    assert result["spec"]["parameters"] == {"b": "2", "c": "3"}


def test_create_namespace_mismatch_raises():
    clientset = InMemoryClientset()
    obj = operator()
    obj["metadata"]["namespace"] = "a"
    with pytest.raises(ValueError, match="does not match"):
        clientset.create("operators", "b", obj)


def test_get_returns_copy():
    clientset = InMemoryClientset()
    clientset.create("operators", "ns", operator())
    fetched = clientset.get("operators", "ns", "test")
    fetched["metadata"]["name"] = "changed"
    assert clientset.get("operators", "ns", "test")["metadata"]["name"] == "test"