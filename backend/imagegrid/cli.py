"""CLI tool for imagegrid.

Usage:
    python -m imagegrid.cli serve --port 8000
    python -m imagegrid.cli browse "cats"
    python -m imagegrid.cli browse "dogs" --pages 3 --base-url http://localhost:8000
    python -m imagegrid.cli -o text browse "red pandas" --view expanded
"""

import argparse
import asyncio
import json
import logging
import sys


def _setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _cmd_serve(args):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "imagegrid.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


async def _cmd_browse(args):
    """Search and scroll through results the way the grid does."""
    from imagegrid.browse import (
        ContinuationTrigger,
        SearchApiClient,
        SearchController,
        View,
    )

    view = View(args.view)

    def render(session):
        status = session.phase.value
        if session.error:
            status = f"{status}: {session.error}"
        print(
            f"[{len(session.items)} items, next={session.next_offset}, "
            f"more={session.has_more}] {status}",
            file=sys.stderr,
        )

    async with SearchApiClient(args.base_url) as client:
        controller = SearchController(client, proxy_base_url=args.base_url)
        controller.subscribe(render)
        trigger = ContinuationTrigger(controller)

        session = await controller.start_search(args.query)
        # Each extra page stands in for the sentinel scrolling into view.
        for _ in range(args.pages - 1):
            if not await trigger.on_visible():
                break

    rows = []
    for item in session.items:
        source = controller.images.source(item, view)
        rows.append({"title": item.title, "link": item.link, "src": source.url})

    if args.output == "json":
        print(json.dumps(rows, indent=2, ensure_ascii=False))
    else:
        for i, row in enumerate(rows, 1):
            print(f"{i:>3}. {row['title']}")
            print(f"     {row['src']}")

    if session.error:
        print(f"\nSearch error: {session.error}", file=sys.stderr)
    elif not session.items:
        print(f'\nNo images found for "{session.query}".', file=sys.stderr)
    elif not session.has_more:
        print("\nNo more results.", file=sys.stderr)


def main():
    parser = argparse.ArgumentParser(
        prog="imagegrid",
        description="imagegrid CLI: serve the API or browse search results",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-o", "--output", default="json",
        choices=["json", "text"],
        help="Output format (default: json)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # --- serve ---
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # --- browse ---
    browse_parser = subparsers.add_parser("browse", help="Search and page through images")
    browse_parser.add_argument("query", help="Search query")
    browse_parser.add_argument(
        "--base-url", default="http://127.0.0.1:8000",
        help="Base URL of a running imagegrid server",
    )
    browse_parser.add_argument("--pages", type=int, default=1, help="Pages to load (default: 1)")
    browse_parser.add_argument(
        "--view", default="grid", choices=["grid", "expanded"],
        help="Which image representation to print",
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "browse" and not args.query.strip():
        parser.error("query must not be empty")

    _setup_logging(args.verbose)

    if args.command == "serve":
        _cmd_serve(args)
    elif args.command == "browse":
        asyncio.run(_cmd_browse(args))


if __name__ == "__main__":
    main()
