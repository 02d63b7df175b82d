"""Configuration objects for chart-synth."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

DEFAULT_OUTPUT_DIR = Path("dist")


class OutputFormat(str, Enum):
    """Serialization format of synthesized chart documents."""

    YAML = "yaml"
    JSON = "json"


@dataclass
class SynthConfig:
    """Configuration for synthesizing an App to disk."""

    output_dir: Path = field(default=DEFAULT_OUTPUT_DIR)
    """Directory that receives one file per chart."""

    output_format: OutputFormat = OutputFormat.YAML
    """Format of each chart document."""

    clean: bool = False
    """Remove previously synthesized chart files before writing."""
