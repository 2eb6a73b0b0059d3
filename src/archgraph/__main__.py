"""
Command line entry point for ArchGraph.

Usage:
    python -m archgraph serve --port 8000
    python -m archgraph show --project demo
    python -m archgraph apply delta.json --project demo
    echo '{"removeNodeIds": ["old-db"]}' | python -m archgraph apply -
    python -m archgraph reset --project demo
"""

import argparse
import json
import sys

from .services.graph_editor import GraphEditorService, create_storage_backend
from .shared import ArchGraphError, get_settings


def _build_service() -> GraphEditorService:
    settings = get_settings()
    return GraphEditorService(storage=create_storage_backend(settings), settings=settings)


def serve_command(args):
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "archgraph.api.app:create_app",
        factory=True,
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def show_command(args):
    """Print a project's graph as JSON."""
    state = _build_service().get_graph(args.project)
    print(json.dumps(state.to_json_dict(), indent=2))
    return 0


def apply_command(args):
    """Apply a delta read from a file or stdin."""
    if args.file == '-':
        text = sys.stdin.read()
    else:
        with open(args.file, encoding='utf-8') as f:
            text = f.read()

    result = _build_service().apply_text(text, args.project)
    print(result.summary)
    if not result.integrity.valid:
        for error in result.integrity.errors:
            print(f"warning: {error}", file=sys.stderr)
    return 0


def reset_command(args):
    """Replace a project's graph with an empty one."""
    state = _build_service().reset_graph(args.project)
    print(f"Reset graph for {state.meta.project_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archgraph",
        description="Edit architecture graphs through validated deltas",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Start the API server")
    serve.add_argument("--host", help="Bind address (default from settings)")
    serve.add_argument("--port", type=int, help="Port (default from settings)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve.set_defaults(func=serve_command)

    show = subparsers.add_parser("show", help="Print a project's graph")
    show.add_argument("--project", help="Project id (default from settings)")
    show.set_defaults(func=show_command)

    apply = subparsers.add_parser("apply", help="Apply a delta from a file, or '-' for stdin")
    apply.add_argument("file", help="File holding the delta (model output is accepted)")
    apply.add_argument("--project", help="Project id (default from settings)")
    apply.set_defaults(func=apply_command)

    reset = subparsers.add_parser("reset", help="Empty a project's graph")
    reset.add_argument("--project", help="Project id (default from settings)")
    reset.set_defaults(func=reset_command)

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except ArchGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
