# supportchat/cli/api.py
from supportchat.config import load_settings
from supportchat.logging import get_logger


def register_subcommands(subparsers):
    subparsers.add_parser("status", help="Check api status")
    starter_parser = subparsers.add_parser("start", help="start the API server")
    starter_parser.add_argument("--host", default=None, help="Host to bind (default: SUPPORTCHAT_HOST or 0.0.0.0)")
    starter_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: PORT or 4000)")


def dispatch(args):
    """Dispatch API CLI subcommands using a simple lookup table.

    Errors from handlers are allowed to propagate so callers can see the
    underlying exception. Unknown subcommands raise ``ValueError`` with a clear
    message.
    """
    logger = get_logger(__name__)

    def _status() -> None:
        logger.info("run `supportchat api start` to start the API server")

    def _start() -> None:
        from supportchat.api.main import app
        import uvicorn

        settings = load_settings()
        host = getattr(args, "host", None) or settings.host
        port = getattr(args, "port", None) or settings.port
        logger.info("Backend listening on http://%s:%s", host, port)
        uvicorn.run(app, host=host, port=port)

    commands = {"status": _status, "start": _start}
    try:
        handler = commands[args.subcommand]
    except KeyError as exc:
        message = f"No handler for API subcommand: {args.subcommand}"
        logger.error(message)
        raise ValueError(message) from exc

    handler()
