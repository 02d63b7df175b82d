"""chart-synth get action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import pathlib
from typing import cast

from chart_synth.config import DEFAULT_OUTPUT_DIR
from chart_synth.synth import read_synthesized

from .format import JsonFormatter, PrintFormatter, StructFormatter, YamlFormatter

_LOGGER = logging.getLogger(__name__)

COLUMNS = ["kind", "namespace", "name"]


class GetAction:
    """Get the resources from a synthesized directory."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Print resources from a synthesized directory",
                description="""Read a synthesized directory back, following the
                    kustomization when present, and print its resources.""",
            ),
        )
        args.add_argument(
            "--output-dir",
            type=pathlib.Path,
            default=DEFAULT_OUTPUT_DIR,
            help="Directory holding the synthesized documents",
        )
        args.add_argument(
            "--output",
            "-o",
            choices=["print", "yaml", "json"],
            default="print",
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output_dir: pathlib.Path,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        docs = await read_synthesized(output_dir)
        formatter: StructFormatter
        if output == "yaml":
            formatter = YamlFormatter()
        elif output == "json":
            formatter = JsonFormatter()
        else:
            formatter = PrintFormatter(COLUMNS)
            docs = [
                {
                    "kind": doc.get("kind"),
                    "namespace": doc.get("metadata", {}).get("namespace", ""),
                    "name": doc.get("metadata", {}).get("name"),
                }
                for doc in docs
            ]
        if not docs:
            _LOGGER.info("No resources found in %s", output_dir)
            return
        formatter.print(docs)
