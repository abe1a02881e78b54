"""
tokenprobe API application.

This module builds the FastAPI application and runs it under uvicorn.
"""

import argparse
import sys
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tokenprobe import __version__
from tokenprobe.api.exception_handlers import register_exception_handlers
from tokenprobe.api.middleware import request_id_middleware
from tokenprobe.api.model import EngineManager
from tokenprobe.api.routers import props_router, common_router
from tokenprobe.domain.interfaces import InferenceEngine
from tokenprobe.utils import config
from tokenprobe.utils.config_manager import ConfigurationError, load_file_data
from tokenprobe.utils.api_errors import APIError
from tokenprobe.utils.logger import get_logger

logger = get_logger("tokenprobe-api")


def create_app(engine: Optional[InferenceEngine] = None,
               stable_softmax: Optional[bool] = None) -> FastAPI:
    """
    Create and configure a FastAPI application.

    Args:
        engine: Preloaded engine; loaded from configuration on first request
            when omitted
        stable_softmax: Override for ``config.probe.stable_softmax``

    Returns:
        FastAPI: Configured application
    """
    app = FastAPI(
        title="tokenprobe API",
        description="""
        Reports a language model's next-token probability for each token of a
        comma-separated list of target strings.
        """,
        version=__version__,
    )

    app.state.engine_manager = EngineManager(engine, stable_softmax=stable_softmax)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_id_middleware)

    register_exception_handlers(app)

    app.include_router(props_router)
    app.include_router(common_router)

    return app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the server."""
    parser = argparse.ArgumentParser(description="Run the tokenprobe HTTP server")
    parser.add_argument("-m", "--model", type=str, default=None,
                        help="Model name or path (defaults to configuration)")
    parser.add_argument("-c", "--ctx-size", type=int, default=None,
                        help="Context window override in tokens")
    parser.add_argument("--device", type=str, default=None,
                        choices=["auto", "cpu", "cuda", "mps"],
                        help="Device to run the model on")
    parser.add_argument("--host", type=str, default=None, help="Address to bind")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to YAML or JSON configuration file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Load the model and serve until ``POST /shutdown``."""
    args = parse_args(argv)

    overrides = {
        "model": {"model_id": args.model, "n_ctx": args.ctx_size, "device": args.device},
        "api": {"host": args.host, "port": args.port},
    }
    try:
        if args.config:
            config.update(load_file_data(args.config))
        config.update(
            {section: {k: v for k, v in values.items() if v is not None}
             for section, values in overrides.items()}
        )
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    app = create_app()
    manager = app.state.engine_manager
    try:
        manager.load()
    except APIError as e:
        logger.error(e.message)
        sys.exit(1)

    server = uvicorn.Server(
        uvicorn.Config(app, host=config.api.host, port=config.api.port, log_level="info")
    )
    manager.server = server

    logger.info(f"Listening on http://{config.api.host}:{config.api.port}")
    server.run()


# Run with: python -m tokenprobe.api.app --model gpt2
if __name__ == "__main__":
    main()
