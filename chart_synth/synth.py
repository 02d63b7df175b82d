"""Library for synthesizing an App of charts to files on disk.

Synthesis happens in two passes. The whole tree is validated and every chart
is rendered in memory first, then one file is written per chart. A malformed
resource or a kustomization that refers to a chart that is not part of the
app fails the run before any file exists.
"""

from collections.abc import Iterable
import json
import logging
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
from aiofiles.ospath import isdir, isfile
import yaml

from .chart import CHART_SUFFIX, Chart, Node, NodeT, chart_output_filename
from .config import OutputFormat, SynthConfig
from .exceptions import (
    DanglingReferenceError,
    DuplicateIdError,
    InputException,
    ValidationError,
)
from .kustomize import (
    KUSTOMIZATION_NAME,
    KustomizationChart,
    is_kustomization,
    kustomization_resources,
)
from .manifest import dump_yaml

__all__ = [
    "App",
    "validate_app",
    "render_chart",
    "synth_app",
    "read_synthesized",
]

_LOGGER = logging.getLogger(__name__)

APP_ID = "app"
MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")
KUSTOMIZATION_FILENAMES = (
    "kustomization.yaml",
    "kustomization.yml",
    chart_output_filename(KUSTOMIZATION_NAME, OutputFormat.YAML),
    chart_output_filename(KUSTOMIZATION_NAME, OutputFormat.JSON),
)


class App(Node):
    """Root of the construct tree, holding the charts to synthesize."""

    def __init__(self, config: SynthConfig | None = None, app_id: str = APP_ID) -> None:
        """Initialize App."""
        super().__init__(app_id)
        self.config = config or SynthConfig()

    def add_child(self, child: NodeT) -> NodeT:
        if not isinstance(child, Chart):
            raise ValidationError(
                f"Only charts may be added to {self.path}, got {type(child).__name__}"
            )
        return super().add_child(child)

    @property
    def charts(self) -> list[Chart]:
        """Return the charts in insertion order."""
        return [child for child in self.children if isinstance(child, Chart)]

    def chart(self, name: str) -> Chart:
        """Return the chart with the given name."""
        if not isinstance(node := self.find(name), Chart):
            raise KeyError(f"App has no chart named '{name}'")
        return node

    async def synth(self) -> list[Path]:
        """Write every chart to the configured output directory."""
        return await synth_app(self, self.config)


def validate_app(app: App, output_format: OutputFormat = OutputFormat.YAML) -> None:
    """Validate the whole tree before anything is written."""
    filenames: dict[str, str] = {}
    for chart in app.charts:
        filename = chart.output_filename(output_format)
        if (other := filenames.get(filename)) is not None:
            raise DuplicateIdError(
                f"Charts {other} and {chart.name} both write to {filename}"
            )
        filenames[filename] = chart.name
    known = set(filenames.values())
    for chart in app.charts:
        if not isinstance(chart, KustomizationChart):
            continue
        if chart.output_format != output_format:
            raise ValidationError(
                f"Chart {chart.name} references {chart.output_format.value} "
                f"outputs but the app is synthesized as {output_format.value}"
            )
        chart.validate_references(known)
    for chart in app.charts:
        _validate_kustomizations(chart, set(filenames), output_format)


def _validate_kustomizations(
    chart: Chart, filenames: set[str], output_format: OutputFormat
) -> None:
    """Check each kustomization in a chart only lists the outputs of this run."""
    own = chart.output_filename(output_format)
    for resource in chart.resources:
        doc = resource.to_doc()
        if not is_kustomization(doc):
            continue
        try:
            entries = kustomization_resources(doc)
        except InputException as err:
            raise ValidationError(f"Chart {chart.name}: {err}") from err
        for entry in entries:
            if entry == own or entry not in filenames:
                raise DanglingReferenceError(chart.name, entry)


def render_chart(chart: Chart, output_format: OutputFormat = OutputFormat.YAML) -> str:
    """Return the serialized document for a chart."""
    docs = chart.to_docs()
    if output_format == OutputFormat.JSON:
        return json.dumps(docs, indent=2, sort_keys=False) + "\n"
    return dump_yaml(docs)


async def synth_app(app: App, config: SynthConfig | None = None) -> list[Path]:
    """Validate and write one file per chart, returning the written paths."""
    config = config or app.config
    validate_app(app, config.output_format)
    output_format = config.output_format
    rendered = [
        (chart.output_filename(output_format), render_chart(chart, output_format))
        for chart in app.charts
    ]

    output_dir = Path(config.output_dir)
    await aiofiles.os.makedirs(output_dir, exist_ok=True)
    if config.clean:
        await _remove_stale(output_dir, {filename for filename, _ in rendered})

    paths = []
    for filename, content in rendered:
        path = output_dir / filename
        _LOGGER.debug("Writing %s", path)
        async with aiofiles.open(str(path), mode="w") as output_file:
            await output_file.write(content)
        paths.append(path)
    _LOGGER.info("Synthesized %d charts to %s", len(paths), output_dir)
    return paths


async def _remove_stale(output_dir: Path, keep: set[str]) -> None:
    for path in sorted(output_dir.glob(f"*{CHART_SUFFIX}.*")):
        if path.name in keep or path.suffix not in MANIFEST_SUFFIXES:
            continue
        _LOGGER.debug("Removing stale output %s", path)
        await aiofiles.os.remove(path)


async def _read_docs(path: Path) -> list[dict[str, Any]]:
    """Return the documents in a YAML or JSON manifest file."""
    if not await isfile(path):
        raise InputException(f"Manifest file does not exist: {path}")
    async with aiofiles.open(str(path)) as manifest_file:
        content = await manifest_file.read()
    try:
        loaded = list(yaml.safe_load_all(content))
    except yaml.YAMLError as err:
        raise InputException(f"Unable to parse manifest file {path}: {err}") from err
    docs: list[dict[str, Any]] = []
    for doc in loaded:
        if doc is None:
            continue
        if isinstance(doc, list):
            docs.extend(doc)
        else:
            docs.append(doc)
    return docs


async def _read_all(paths: Iterable[Path]) -> list[dict[str, Any]]:
    docs: list[dict[str, Any]] = []
    for path in paths:
        docs.extend(await _read_docs(path))
    return docs


async def read_synthesized(output_dir: Path) -> list[dict[str, Any]]:
    """Return the documents previously synthesized to a directory.

    When the directory holds a kustomization, only the manifests it lists are
    returned, in listed order. Otherwise every manifest file is returned in
    filename order.
    """
    if not await isdir(output_dir):
        raise InputException(f"Output directory does not exist: {output_dir}")
    kustomizations: list[Path] = []
    manifests: list[Path] = []
    for path in sorted(output_dir.iterdir()):
        if not path.is_file() or path.suffix not in MANIFEST_SUFFIXES:
            continue
        if path.name in KUSTOMIZATION_FILENAMES:
            kustomizations.append(path)
        else:
            manifests.append(path)

    if not kustomizations:
        _LOGGER.debug("No kustomization found in %s", output_dir)
        return await _read_all(manifests)

    referenced: list[Path] = []
    for kustomization in kustomizations:
        for doc in await _read_docs(kustomization):
            referenced.extend(
                kustomization.parent / resource
                for resource in kustomization_resources(doc)
            )
    _LOGGER.debug("Kustomization references %s", [str(p) for p in referenced])
    return await _read_all(referenced)
