"""
tokenprobe command line entry point.

Loads the model, evaluates the prompt once and prints one line per target
token.
"""

import json
import sys
from typing import List, Optional

from tokenprobe.application.services import ProbabilityService
from tokenprobe.cli.argument_parser import ArgumentParser
from tokenprobe.domain.entities import ProbeResult
from tokenprobe.infrastructure.model import TransformersEngine
from tokenprobe.utils import config
from tokenprobe.utils.config_manager import ConfigurationError, load_file_data
from tokenprobe.utils.error_manager import ProbeError
from tokenprobe.utils.logger import get_logger, add_global_context, set_level

logger = get_logger("cli")


def format_result(result: ProbeResult) -> str:
    """Render one ``Token <id>: prob = <p>, token = <piece>`` line per target."""
    return "\n".join(
        f"Token {entry.token_id}: prob = {entry.probability:f}, token = {entry.token}"
        for entry in result.tokens
    )


def apply_arguments(args: dict) -> None:
    """Fold the config file and command line overrides into ``config``."""
    if args.get("config"):
        config.update(load_file_data(args["config"]))

    model_overrides = {
        "model_id": args.get("model"),
        "n_ctx": args.get("ctx_size"),
        "device": args.get("device"),
    }
    config.update({"model": {k: v for k, v in model_overrides.items() if v is not None}})

    if args.get("no_stable_softmax"):
        config.probe.stable_softmax = False
    if args.get("debug"):
        config.debug.global_debug = True
        set_level("DEBUG")
        add_global_context(debug_mode=True)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the probe CLI."""
    args = ArgumentParser.parse_args(argv)

    targets = args.get("targets") or ""
    if not targets:
        print("Error: -t parameter is missing or empty.", file=sys.stderr)
        return 1

    try:
        apply_arguments(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    prompt = args.get("prompt") or config.probe.default_prompt

    engine = None
    try:
        engine = TransformersEngine.from_pretrained(
            model_id=config.model.model_id,
            device=config.model.device,
            n_ctx=config.model.n_ctx,
        )
        service = ProbabilityService(engine, stable_softmax=config.probe.stable_softmax)
        result = service.compute(prompt, targets)
    except ProbeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if engine is not None:
            engine.close()

    if args.get("output_json"):
        print(json.dumps(result.to_dict(), indent=2, allow_nan=False))
    elif result.tokens:
        print(format_result(result))

    return 0


if __name__ == "__main__":
    sys.exit(main())
