"""Library for building the kustomization that aggregates chart outputs.

The kustomization lists the output documents of other charts. The filenames
are derived with `chart_output_filename` so they always match the files
written during synthesis. References are only checked against the set of
synthesized charts when the whole app is validated, since a chart may be
referenced before it is added to the app.
"""

from collections.abc import Iterable, Mapping, Sequence
import logging
from typing import Any

from .chart import Chart, chart_output_filename
from .config import OutputFormat
from .exceptions import DanglingReferenceError, InputException
from .manifest import (
    DEFAULT_NAMESPACE,
    KUSTOMIZE_API_VERSION,
    KUSTOMIZE_DOMAIN,
    KUSTOMIZE_KIND,
    ObjectMeta,
    Resource,
    build_resource,
)

__all__ = [
    "build_kustomization",
    "kustomization_resources",
    "is_kustomization",
    "KustomizationChart",
]

_LOGGER = logging.getLogger(__name__)

KUSTOMIZATION_NAME = "kustomization"


def build_kustomization(
    chart_names: Sequence[str],
    *,
    name: str = KUSTOMIZATION_NAME,
    namespace: str = DEFAULT_NAMESPACE,
    output_format: OutputFormat = OutputFormat.YAML,
) -> Resource:
    """Return a Kustomization listing the output of each chart in order."""
    return build_resource(
        KUSTOMIZE_API_VERSION,
        KUSTOMIZE_KIND,
        ObjectMeta(name=name, namespace=namespace),
        {
            "resources": [
                chart_output_filename(chart_name, output_format)
                for chart_name in chart_names
            ],
        },
    )


def is_kustomization(doc: Mapping[str, Any]) -> bool:
    """Check if the object is a kustomize Kustomization."""
    return doc.get("kind") == KUSTOMIZE_KIND and str(
        doc.get("apiVersion", "")
    ).startswith(KUSTOMIZE_DOMAIN)


def kustomization_resources(doc: Mapping[str, Any]) -> list[str]:
    """Return the resource paths listed by a Kustomization document."""
    if not is_kustomization(doc):
        raise InputException(f"Expected a Kustomization but got: {doc.get('kind')}")
    resources = doc.get("resources") or []
    if not isinstance(resources, list) or not all(
        isinstance(path, str) for path in resources
    ):
        raise InputException(f"Invalid Kustomization resources: {resources}")
    return list(resources)


class KustomizationChart(Chart):
    """A chart holding a single Kustomization that references other charts."""

    def __init__(
        self,
        name: str,
        chart_names: Iterable[str],
        *,
        namespace: str = DEFAULT_NAMESPACE,
        kustomization_name: str = KUSTOMIZATION_NAME,
        output_format: OutputFormat = OutputFormat.YAML,
    ) -> None:
        """Initialize KustomizationChart."""
        super().__init__(name, namespace=namespace)
        self._chart_names = tuple(chart_names)
        self._output_format = OutputFormat(output_format)
        self.add(
            kustomization_name,
            build_kustomization(
                self.chart_names,
                name=kustomization_name,
                namespace=namespace,
                output_format=output_format,
            ),
        )

    @property
    def chart_names(self) -> tuple[str, ...]:
        """Return the referenced chart names in listed order."""
        return self._chart_names

    @property
    def output_format(self) -> OutputFormat:
        return self._output_format

    @property
    def references(self) -> list[str]:
        """Return the output filenames listed by the kustomization."""
        return [
            chart_output_filename(chart_name, self.output_format)
            for chart_name in self.chart_names
        ]

    def validate_references(self, known: set[str]) -> None:
        """Check every referenced chart is one of the known chart names."""
        for chart_name in self.chart_names:
            if chart_name == self.name or chart_name not in known:
                raise DanglingReferenceError(self.name, chart_name)
        _LOGGER.debug("Chart %s references %s", self.name, self.chart_names)
