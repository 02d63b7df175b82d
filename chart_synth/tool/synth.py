"""chart-synth synth action."""

from argparse import (
    ArgumentParser,
    BooleanOptionalAction,
    _SubParsersAction as SubParsersAction,
)
import logging
import pathlib
from typing import cast

from chart_synth.config import DEFAULT_OUTPUT_DIR, OutputFormat, SynthConfig
from chart_synth.sample import build_app

_LOGGER = logging.getLogger(__name__)


class SynthAction:
    """chart-synth synth action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "synth",
                help="Synthesize the sample app charts to a directory",
                description="""Write one manifest document per chart along with
                    a kustomization listing the chart outputs.""",
            ),
        )
        args.add_argument(
            "--output-dir",
            type=pathlib.Path,
            default=DEFAULT_OUTPUT_DIR,
            help="Directory that receives the synthesized documents",
        )
        args.add_argument(
            "--output-format",
            type=OutputFormat,
            choices=list(OutputFormat),
            default=OutputFormat.YAML,
            help="Serialization format of each chart document",
        )
        args.add_argument(
            "--clean",
            type=bool,
            action=BooleanOptionalAction,
            default=False,
            help="Remove previously synthesized chart documents first",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output_dir: pathlib.Path,
        output_format: OutputFormat,
        clean: bool,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        app = build_app(
            SynthConfig(output_dir=output_dir, output_format=output_format, clean=clean)
        )
        for path in await app.synth():
            print(path)
