"""Tests for the chart library."""

import pytest

from chart_synth.chart import (
    ApiObject,
    Chart,
    Node,
    assemble_chart,
    chart_output_filename,
)
from chart_synth.config import OutputFormat
from chart_synth.exceptions import DuplicateIdError, ValidationError
from chart_synth.manifest import ObjectMeta, Resource, build_resource


def test_chart_output_filename() -> None:
    """Test the filename derived from a chart name."""
    assert chart_output_filename("nginx-deployment") == "nginx-deployment.k8s.yaml"
    assert (
        chart_output_filename("nginx-deployment", OutputFormat.JSON)
        == "nginx-deployment.k8s.json"
    )
    assert chart_output_filename("a", "json") == "a.k8s.json"  # type: ignore[arg-type]


def test_chart_output_filename_is_stable() -> None:
    """Test the filename is the same on every call."""
    assert chart_output_filename("headlamp") == chart_output_filename("headlamp")


def test_chart_output_filename_is_injective() -> None:
    """Test distinct chart names never share a filename."""
    names = ["a", "b", "a.k8s", "a-b", "a.b", "nginx", "nginx-deployment", "A"]
    filenames = {chart_output_filename(name) for name in names}
    assert len(filenames) == len(names)


@pytest.mark.parametrize("name", ["", "a/b"])
def test_chart_output_filename_invalid(name: str) -> None:
    """Test names that can not be turned into a filename."""
    with pytest.raises(ValidationError):
        chart_output_filename(name)


def test_node_tree() -> None:
    """Test building a tree of nodes."""
    root = Node("app")
    chart = root.add_child(Chart("web"))
    assert chart.parent is root
    assert root.children == [chart]
    assert root.find("web") is chart
    assert root.find("other") is None
    assert chart.path == "app/web"


def test_node_duplicate_id() -> None:
    """Test a parent rejects a second child with the same id."""
    root = Node("app")
    root.add_child(Chart("web"))
    with pytest.raises(DuplicateIdError, match="already has a child with id 'web'"):
        root.add_child(Chart("web"))


def test_node_already_attached() -> None:
    """Test a node can only have one parent."""
    chart = Chart("web")
    Node("first").add_child(chart)
    with pytest.raises(ValidationError, match="already attached"):
        Node("second").add_child(chart)


def test_node_invalid_id() -> None:
    """Test node ids must be non empty path segments."""
    with pytest.raises(ValidationError):
        Node("")
    with pytest.raises(ValidationError):
        Node("a/b")


def test_api_object_has_no_children() -> None:
    """Test resource nodes are leaves."""
    resource = build_resource("v1", "Secret", {"name": "s", "namespace": "default"})
    node = ApiObject("secret", resource)
    with pytest.raises(ValidationError, match="can not have children"):
        node.add_child(Node("child"))


def test_chart_defaults() -> None:
    """Test the chart namespace and labels are applied to its resources."""
    chart = Chart("web", namespace="web-ns", labels={"team": "web", "app": "web"})
    first = chart.add_resource(
        "deployment", "apps/v1", "Deployment", {"name": "web"}, {"spec": {}}
    )
    second = chart.add_resource(
        "service",
        "v1",
        "Service",
        {"name": "web", "namespace": "other", "labels": {"app": "frontend"}},
    )
    assert first.namespace == "web-ns"
    assert first.metadata.labels == {"team": "web", "app": "web"}
    assert second.namespace == "other"
    assert second.metadata.labels == {"team": "web", "app": "frontend"}
    assert chart.resources == [first, second]
    assert [child.node_id for child in chart.children] == ["deployment", "service"]


def test_chart_without_namespace() -> None:
    """Test a resource without namespace in a chart without a default."""
    chart = Chart("web")
    with pytest.raises(ValidationError, match="missing metadata.namespace"):
        chart.add_resource("deployment", "apps/v1", "Deployment", {"name": "web"})
    assert not chart.children


def test_chart_duplicate_resource() -> None:
    """Test two resources in a chart may not share an identity."""
    chart = Chart("web", namespace="default")
    chart.add_resource("first", "v1", "Service", {"name": "web"})
    with pytest.raises(DuplicateIdError, match="Service/default/web"):
        chart.add_resource("second", "v1", "Service", {"name": "web"})
    chart.add_resource("third", "apps/v1", "Deployment", {"name": "web"})
    assert len(chart.resources) == 2


def test_chart_output_filename_method() -> None:
    """Test a chart uses the shared filename derivation."""
    chart = Chart("headlamp-deployment")
    assert chart.name == "headlamp-deployment"
    assert chart.output_filename() == chart_output_filename("headlamp-deployment")
    assert chart.output_filename(OutputFormat.JSON) == "headlamp-deployment.k8s.json"


def test_assemble_chart() -> None:
    """Test assembling a chart from built resources and plain documents."""
    secret = build_resource("v1", "Secret", {"name": "admin", "namespace": "kube"})
    chart = assemble_chart(
        "headlamp",
        "default",
        [
            (
                "service",
                {
                    "apiVersion": "v1",
                    "kind": "Service",
                    "metadata": {"name": "headlamp"},
                    "spec": {"ports": [{"port": 80}]},
                },
            ),
            ("secret", secret),
        ],
        labels={"app": "headlamp"},
    )
    assert chart.to_docs() == [
        {
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": {
                "name": "headlamp",
                "namespace": "default",
                "labels": {"app": "headlamp"},
            },
            "spec": {"ports": [{"port": 80}]},
        },
        {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {
                "name": "admin",
                "namespace": "kube",
                "labels": {"app": "headlamp"},
            },
        },
    ]


def test_assemble_empty_chart() -> None:
    """Test a chart may hold no resources."""
    chart = assemble_chart("empty", None, [])
    assert chart.resources == []
    assert chart.to_docs() == []


def test_walk() -> None:
    """Test walking the tree visits nodes depth first in insertion order."""
    root = Node("app")
    first = root.add_child(Chart("first", namespace="default"))
    first.add_resource("svc", "v1", "Service", {"name": "svc"})
    root.add_child(Chart("second"))
    assert [node.path for node in root.walk()] == [
        "app",
        "app/first",
        "app/first/svc",
        "app/second",
    ]


def test_chart_add_unvalidated_resource() -> None:
    """Test a malformed resource can not be placed in a chart."""
    chart = Chart("web", namespace="default")
    with pytest.raises(ValidationError):
        chart.add("x", Resource(api_version="", kind="", metadata=ObjectMeta(name="")))
    assert not chart.children
