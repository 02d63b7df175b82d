"""Tests for kustomize library."""

import pytest

from chart_synth.config import OutputFormat
from chart_synth.exceptions import DanglingReferenceError, InputException
from chart_synth.kustomize import (
    KustomizationChart,
    build_kustomization,
    is_kustomization,
    kustomization_resources,
)


def test_build_kustomization() -> None:
    """Test the kustomization lists chart outputs in the given order."""
    resource = build_kustomization(["a", "b"])
    assert resource.to_doc() == {
        "apiVersion": "kustomize.config.k8s.io/v1beta1",
        "kind": "Kustomization",
        "metadata": {"name": "kustomization", "namespace": "default"},
        "resources": ["a.k8s.yaml", "b.k8s.yaml"],
    }


def test_build_kustomization_order() -> None:
    """Test reordering the chart names only reorders the references."""
    forward = build_kustomization(["headlamp-deployment", "nginx-deployment"])
    reverse = build_kustomization(["nginx-deployment", "headlamp-deployment"])
    assert forward.payload["resources"] == [
        "headlamp-deployment.k8s.yaml",
        "nginx-deployment.k8s.yaml",
    ]
    assert reverse.payload["resources"] == [
        "nginx-deployment.k8s.yaml",
        "headlamp-deployment.k8s.yaml",
    ]


@pytest.mark.parametrize("names", [[], ["a"], ["c", "b", "a"]])
def test_build_kustomization_length(names: list[str]) -> None:
    """Test there is one reference per chart name."""
    assert len(build_kustomization(names).payload["resources"]) == len(names)


def test_build_kustomization_json() -> None:
    """Test references follow the output format."""
    resource = build_kustomization(
        ["a"], name="all", namespace="apps", output_format=OutputFormat.JSON
    )
    assert resource.name == "all"
    assert resource.namespace == "apps"
    assert resource.payload["resources"] == ["a.k8s.json"]


def test_kustomization_chart() -> None:
    """Test a chart holding a single kustomization."""
    chart = KustomizationChart("kustomization", ["b", "a"])
    assert chart.chart_names == ("b", "a")
    assert chart.references == ["b.k8s.yaml", "a.k8s.yaml"]
    assert len(chart.resources) == 1
    assert chart.to_docs()[0]["resources"] == chart.references


def test_validate_references() -> None:
    """Test references to known charts are accepted."""
    chart = KustomizationChart("kustomization", ["b", "a"])
    chart.validate_references({"a", "b", "kustomization"})


def test_validate_dangling_reference() -> None:
    """Test a reference to a chart that is not synthesized."""
    chart = KustomizationChart("kustomization", ["a", "missing"])
    with pytest.raises(DanglingReferenceError, match="'missing'") as exc_info:
        chart.validate_references({"a", "kustomization"})
    assert exc_info.value.referrer == "kustomization"
    assert exc_info.value.chart_name == "missing"


def test_validate_self_reference() -> None:
    """Test a kustomization may not list its own output."""
    chart = KustomizationChart("kustomization", ["kustomization"])
    with pytest.raises(DanglingReferenceError):
        chart.validate_references({"kustomization"})


def test_is_kustomization() -> None:
    """Test detecting kustomize Kustomization documents."""
    assert is_kustomization(build_kustomization(["a"]).to_doc())
    assert not is_kustomization(
        {"apiVersion": "kustomize.toolkit.fluxcd.io/v1", "kind": "Kustomization"}
    )
    assert not is_kustomization({"apiVersion": "v1", "kind": "ConfigMap"})


def test_kustomization_resources() -> None:
    """Test reading the references back out of a document."""
    doc = build_kustomization(["a", "b"]).to_doc()
    assert kustomization_resources(doc) == ["a.k8s.yaml", "b.k8s.yaml"]
    del doc["resources"]
    assert kustomization_resources(doc) == []


def test_kustomization_resources_invalid() -> None:
    """Test reading references from documents that are not kustomizations."""
    with pytest.raises(InputException, match="Expected a Kustomization"):
        kustomization_resources({"apiVersion": "v1", "kind": "ConfigMap"})
    doc = build_kustomization([]).to_doc()
    doc["resources"] = "a.k8s.yaml"
    with pytest.raises(InputException, match="Invalid Kustomization resources"):
        kustomization_resources(doc)


def test_kustomization_chart_names_are_fixed() -> None:
    """Test the referenced names can not drift from the rendered document."""
    chart = KustomizationChart("kustomization", ["a"])
    with pytest.raises(AttributeError):
        chart.chart_names.append("b")  # type: ignore[attr-defined]
    with pytest.raises(AttributeError):
        chart.chart_names = ("b",)  # type: ignore[misc]
    assert chart.references == chart.to_docs()[0]["resources"]
