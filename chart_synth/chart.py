"""Library for assembling resources into named charts.

Charts and resources form a tree of named nodes. A parent owns its children
and child ids are unique within a parent, which is checked when the child is
inserted. Each chart maps to exactly one output document whose filename is
derived by `chart_output_filename`; every component that refers to the output
of a chart must go through that function.
"""

from collections.abc import Generator, Mapping, Sequence
import dataclasses
import logging
from typing import Any, TypeVar

from .config import OutputFormat
from .exceptions import DuplicateIdError, ValidationError
from .manifest import NamedResource, ObjectMeta, Resource, build_resource

__all__ = [
    "chart_output_filename",
    "assemble_chart",
    "Node",
    "ApiObject",
    "Chart",
]

_LOGGER = logging.getLogger(__name__)

CHART_SUFFIX = ".k8s"
PATH_SEP = "/"

NodeT = TypeVar("NodeT", bound="Node")


def chart_output_filename(
    name: str, output_format: OutputFormat = OutputFormat.YAML
) -> str:
    """Return the filename that the chart with the given name is written to."""
    if not name:
        raise ValidationError("Chart name must not be empty")
    if PATH_SEP in name:
        raise ValidationError(f"Chart name '{name}' must not contain '{PATH_SEP}'")
    return f"{name}{CHART_SUFFIX}.{OutputFormat(output_format).value}"


class Node:
    """A named node in the construct tree."""

    def __init__(self, node_id: str) -> None:
        """Initialize Node."""
        if not node_id:
            raise ValidationError("Node id must not be empty")
        if PATH_SEP in node_id:
            raise ValidationError(f"Node id '{node_id}' must not contain '{PATH_SEP}'")
        self._node_id = node_id
        self._parent: Node | None = None
        self._children: dict[str, Node] = {}

    @property
    def node_id(self) -> str:
        return self._node_id

    @property
    def parent(self) -> "Node | None":
        return self._parent

    @property
    def children(self) -> list["Node"]:
        """Return the direct children in insertion order."""
        return list(self._children.values())

    @property
    def path(self) -> str:
        """Return the ids from the root down to this node."""
        parts = []
        node: Node | None = self
        while node is not None:
            parts.append(node.node_id)
            node = node.parent
        return PATH_SEP.join(reversed(parts))

    def add_child(self, child: NodeT) -> NodeT:
        """Attach a child node, rejecting ids already used under this node."""
        if child.parent is not None:
            raise ValidationError(
                f"Node {child.path} is already attached and can not be added to {self.path}"
            )
        if child.node_id in self._children:
            raise DuplicateIdError(
                f"Node {self.path} already has a child with id '{child.node_id}'"
            )
        child._parent = self
        self._children[child.node_id] = child
        _LOGGER.debug("Added node %s", child.path)
        return child

    def find(self, node_id: str) -> "Node | None":
        """Return the direct child with the given id."""
        return self._children.get(node_id)

    def walk(self) -> Generator["Node", None, None]:
        """Yield this node and all descendants, depth first in insertion order."""
        yield self
        for child in self._children.values():
            yield from child.walk()


class ApiObject(Node):
    """A tree node holding a single Resource."""

    def __init__(self, node_id: str, resource: Resource) -> None:
        """Initialize ApiObject."""
        super().__init__(node_id)
        self.resource = resource

    def add_child(self, child: NodeT) -> NodeT:
        raise ValidationError(f"Resource node {self.path} can not have children")


class Chart(Node):
    """A named group of resources written to a single output document.

    The chart namespace is applied to resources that do not set one and the
    chart labels are merged under the labels of each resource.
    """

    def __init__(
        self,
        name: str,
        *,
        namespace: str | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize Chart."""
        chart_output_filename(name)
        super().__init__(name)
        self.namespace = namespace
        self.labels = dict(labels or {})

    @property
    def name(self) -> str:
        return self.node_id

    def output_filename(self, output_format: OutputFormat = OutputFormat.YAML) -> str:
        """Return the filename this chart is synthesized to."""
        return chart_output_filename(self.name, output_format)

    @property
    def resources(self) -> list[Resource]:
        """Return the resources in the chart in insertion order."""
        return [
            child.resource for child in self.children if isinstance(child, ApiObject)
        ]

    def add_resource(
        self,
        resource_id: str,
        api_version: str,
        kind: str,
        metadata: ObjectMeta | Mapping[str, Any],
        payload: Mapping[str, Any] | None = None,
    ) -> Resource:
        """Build a resource with the chart defaults and add it to the chart."""
        resource = build_resource(
            api_version,
            kind,
            metadata,
            payload,
            default_namespace=self.namespace,
        )
        return self.add(resource_id, resource)

    def add_doc(self, resource_id: str, doc: Mapping[str, Any]) -> Resource:
        """Add a resource from a plain kubernetes document."""
        resource = Resource.parse_doc(doc, default_namespace=self.namespace)
        return self.add(resource_id, resource)

    def add(self, resource_id: str, resource: Resource) -> Resource:
        """Add an already built resource, applying the chart labels."""
        resource = self._with_labels(resource)
        identity = resource.named_resource
        if identity in self._identities():
            raise DuplicateIdError(f"Chart {self.name} already contains {identity}")
        self.add_child(ApiObject(resource_id, resource))
        return resource

    def _identities(self) -> set[NamedResource]:
        return {resource.named_resource for resource in self.resources}

    def _with_labels(self, resource: Resource) -> Resource:
        if not self.labels:
            return resource
        labels = {**self.labels, **(resource.metadata.labels or {})}
        return dataclasses.replace(
            resource, metadata=dataclasses.replace(resource.metadata, labels=labels)
        )

    def to_docs(self) -> list[dict[str, Any]]:
        """Return the plain kubernetes documents of this chart."""
        return [resource.to_doc() for resource in self.resources]


def assemble_chart(
    name: str,
    default_namespace: str | None,
    resources: Sequence[tuple[str, Resource | Mapping[str, Any]]],
    labels: Mapping[str, str] | None = None,
) -> Chart:
    """Return a Chart holding the given (resource id, resource) pairs.

    A resource may be a built Resource or a plain kubernetes document.
    """
    chart = Chart(name, namespace=default_namespace, labels=labels)
    for resource_id, resource in resources:
        if isinstance(resource, Resource):
            chart.add(resource_id, resource)
        else:
            chart.add_doc(resource_id, resource)
    return chart
