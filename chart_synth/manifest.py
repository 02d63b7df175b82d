"""Representation of the Kubernetes objects contained in a chart.

A Resource is an immutable record of a single Kubernetes object. The identity
fields are checked whenever a Resource is created, so that a malformed object
fails before it can be placed in a chart or any output is written.
`build_resource` adds the default namespace and copies the caller input.
"""

import copy
import dataclasses
from dataclasses import dataclass, field
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

import yaml
from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .exceptions import ValidationError

__all__ = [
    "build_resource",
    "dump_yaml",
    "ObjectMeta",
    "NamedResource",
    "Resource",
]

DEFAULT_NAMESPACE = "default"
KUSTOMIZE_DOMAIN = "kustomize.config.k8s.io"
KUSTOMIZE_API_VERSION = f"{KUSTOMIZE_DOMAIN}/v1beta1"
APPS_API_VERSION = "apps/v1"
CORE_API_VERSION = "v1"
DEPLOYMENT_KIND = "Deployment"
SERVICE_KIND = "Service"
SECRET_KIND = "Secret"
KUSTOMIZE_KIND = "Kustomization"

# Top level keys owned by the record itself, never part of the payload
RESERVED_KEYS = ("apiVersion", "kind", "metadata")


class _BlockDumper(yaml.SafeDumper):
    """Dumper that writes repeated objects in full rather than as aliases."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def dump_yaml(docs: Iterable[dict[str, Any]]) -> str:
    """Return the documents as a multi-document YAML stream in key order."""
    return yaml.dump_all(
        docs, Dumper=_BlockDumper, sort_keys=False, explicit_start=True
    )


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass(frozen=True)
class ObjectMeta(DataClassDictMixin):
    """Standard object metadata."""

    name: str
    """The name of the object."""

    namespace: str | None = None
    """The namespace of the object."""

    labels: Mapping[str, str] | None = None
    """Labels used to select the object."""

    annotations: Mapping[str, str] | None = None
    """Arbitrary non-identifying metadata."""

    def __post_init__(self) -> None:
        for key in ("labels", "annotations"):
            if (value := getattr(self, key)) is not None:
                object.__setattr__(self, key, MappingProxyType(dict(value)))

    @classmethod
    def parse_doc(cls, doc: Mapping[str, Any]) -> "ObjectMeta":
        """Parse ObjectMeta from the metadata of a kubernetes object."""
        return cls(
            name=doc.get("name", ""),
            namespace=doc.get("namespace"),
            labels=copy.deepcopy(doc.get("labels")),
            annotations=copy.deepcopy(doc.get("annotations")),
        )

    class Config(BaseConfig):
        omit_none = True


@dataclass(frozen=True)
class Resource(DataClassDictMixin):
    """A single Kubernetes object owned by a chart."""

    api_version: str = field(metadata=field_options(alias="apiVersion"))
    """The apiVersion of the object."""

    kind: str
    """The kind of the object."""

    metadata: ObjectMeta
    """The identity and labels of the object."""

    payload: Mapping[str, Any] = field(default_factory=dict)
    """The kind specific top level fields e.g. spec, type or resources."""

    def __post_init__(self) -> None:
        """Reject objects with a missing identity field."""
        label = f"{self.kind or 'object'} '{self.metadata.name}'"
        if not self.api_version:
            raise ValidationError(f"Invalid {label} missing apiVersion")
        if not self.kind:
            raise ValidationError(f"Invalid {label} missing kind")
        if not self.metadata.name:
            raise ValidationError(f"Invalid {self.kind} missing metadata.name")
        if not self.metadata.namespace:
            raise ValidationError(
                f"Invalid {label} missing metadata.namespace and no default namespace"
            )
        if reserved := [key for key in RESERVED_KEYS if key in self.payload]:
            raise ValidationError(f"Invalid {label} payload overrides {reserved}")
        object.__setattr__(
            self, "payload", MappingProxyType(copy.deepcopy(dict(self.payload)))
        )

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str | None:
        return self.metadata.namespace

    @property
    def named_resource(self) -> NamedResource:
        """Return the (kind, namespace, name) identity of the object."""
        return NamedResource(
            kind=self.kind, namespace=self.metadata.namespace, name=self.metadata.name
        )

    def to_doc(self) -> dict[str, Any]:
        """Return the plain kubernetes document for this object."""
        doc = self.to_dict()
        doc.pop("payload")
        doc.update(copy.deepcopy(dict(self.payload)))
        return doc

    @classmethod
    def parse_doc(
        cls, doc: Mapping[str, Any], *, default_namespace: str | None = None
    ) -> "Resource":
        """Parse a Resource from a plain kubernetes document."""
        if not isinstance(doc, Mapping):
            raise ValidationError(
                f"Invalid object, expected a mapping but got {type(doc).__name__}"
            )
        if not isinstance(metadata := doc.get("metadata"), Mapping):
            raise ValidationError(f"Invalid object missing metadata: {doc}")
        return build_resource(
            doc.get("apiVersion", ""),
            doc.get("kind", ""),
            ObjectMeta.parse_doc(metadata),
            {k: v for k, v in doc.items() if k not in RESERVED_KEYS},
            default_namespace=default_namespace,
        )

    def yaml(self) -> str:
        """Return a YAML string representation of the document."""
        return dump_yaml([self.to_doc()])

    @classmethod
    def parse_yaml(cls, content: str) -> "Resource":
        """Parse a serialized document."""
        return cls.parse_doc(yaml.safe_load(content))

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


def build_resource(
    api_version: str,
    kind: str,
    metadata: ObjectMeta | Mapping[str, Any],
    payload: Mapping[str, Any] | None = None,
    *,
    default_namespace: str | None = None,
) -> Resource:
    """Return a validated, immutable Resource.

    The namespace falls back to `default_namespace` when the metadata does not
    name one. Nested mappings are copied so the caller can not mutate the
    record after it is built.
    """
    if not isinstance(metadata, ObjectMeta):
        metadata = ObjectMeta.parse_doc(metadata)
    return Resource(
        api_version=api_version,
        kind=kind,
        metadata=dataclasses.replace(
            metadata, namespace=metadata.namespace or default_namespace
        ),
        payload=payload or {},
    )
