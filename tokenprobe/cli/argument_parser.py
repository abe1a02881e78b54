import argparse
from typing import Any, List, Optional

from tokenprobe.utils import config


class ArgumentParser:
    """
    Responsible for parsing command line arguments for the probe CLI.
    """

    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Report a model's next-token probability for target strings",
            epilog='example: tokenprobe -m gpt2 -p "Hello my name is" -t " John, Bob"',
        )

        parser.add_argument(
            "--config",
            type=str,
            help="Path to YAML or JSON configuration file",
        )
        parser.add_argument(
            "-m",
            "--model",
            type=str,
            default=None,
            help="Model name or path (defaults to configuration)",
        )
        parser.add_argument(
            "-p",
            "--prompt",
            type=str,
            default=None,
            help=f"Text prompt (default: {config.probe.default_prompt!r})",
        )
        parser.add_argument(
            "-t",
            "--targets",
            type=str,
            default="",
            help="Comma-separated target strings",
        )
        parser.add_argument(
            "-c",
            "--ctx-size",
            type=int,
            default=None,
            help="Context window override in tokens",
        )
        parser.add_argument(
            "--device",
            type=str,
            default=None,
            choices=["auto", "cpu", "cuda", "mps"],
            help="Device to run the model on",
        )
        parser.add_argument(
            "--no-stable-softmax",
            action="store_true",
            help="Exponentiate raw logits without subtracting the maximum",
        )
        parser.add_argument(
            "--output-json",
            action="store_true",
            help="Output results in JSON format instead of formatted text",
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug logging",
        )
        return parser

    @staticmethod
    def parse_args(argv: Optional[List[str]] = None) -> dict[str, Any]:
        """
        Parse command line arguments.

        Returns:
            dict[str, Any]: Dictionary of parsed arguments
        """
        args = ArgumentParser.build_parser().parse_args(argv)
        return vars(args)
