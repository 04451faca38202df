"""
Command-line interface for CineSearch.

Provides commands for:
- serve: Run the HTTP API under uvicorn
- search: Run a single search through the query planner
- test: Check connectivity to TMDB
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from .config import Config
from .context import AppContext
from .errors import SearchValidationError, UpstreamError
from .models import SearchRequest, SearchResult


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog="cinesearch",
        description="CineSearch - Movie search broker in front of TMDB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the API
  python -m cinesearch serve --port 3000

  # Title search
  python -m cinesearch search --query "Inception"

  # Filter search
  python -m cinesearch search --genre 28 --director "Christopher Nolan" --json
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API",
    )
    serve_parser.add_argument("--host", help="Bind address (default: API_HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, help="Port (default: PORT or 3000)")
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development only)",
    )

    # Search command
    search_parser = subparsers.add_parser(
        "search",
        help="Search TMDB through the query planner",
    )
    search_parser.add_argument("--query", help="Movie title keywords")
    search_parser.add_argument("--year", help="Primary release year")
    search_parser.add_argument("--genre", help="TMDB genre ID")
    search_parser.add_argument("--cast", help="Actor name")
    search_parser.add_argument("--director", help="Director name")
    search_parser.add_argument("--page", default="1", help="Results page (default: 1)")
    search_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw response envelope",
    )

    # Test command
    subparsers.add_parser(
        "test",
        help="Test TMDB API connection",
    )

    return parser


def _display_line(index: int, movie: dict) -> str:
    year = (movie.get("release_date") or "")[:4] or "----"
    rating = movie.get("vote_average")
    rating_str = f"{rating:.1f}" if isinstance(rating, (int, float)) else "-"
    return f"  [{index}] {movie.get('title', 'Untitled')} ({year}) - {rating_str} - ID: {movie.get('id')}"


def cmd_serve(config: Config, args) -> int:
    """Run serve command."""
    import uvicorn

    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=args.host or config.api_host,
        port=args.port or config.api_port,
        reload=args.reload,
        log_level=config.log_level.lower(),
    )
    return 0


def cmd_search(context: AppContext, args) -> int:
    """Run search command."""
    request = SearchRequest(
        title_query=args.query,
        year=args.year,
        genre_id=args.genre,
        cast_name=args.cast,
        director_name=args.director,
        page=args.page,
    )

    try:
        result: SearchResult = asyncio.run(context.planner.plan(request))
    except SearchValidationError as e:
        print(f"Invalid search: {e.message}")
        return 2
    except UpstreamError as e:
        print(f"TMDB error: {e.message}")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    if result.is_empty():
        print("\nNo movies found.")
        return 0

    print(
        f"\nPage {result.page} of {result.total_pages} "
        f"({result.total_results:,} results):\n"
    )
    for i, movie in enumerate(result.results, 1):
        print(_display_line(i, movie))
    return 0


def cmd_test(context: AppContext) -> int:
    """Run test command."""
    try:
        data = asyncio.run(context.client.get_genres())
    except UpstreamError as e:
        print(f"Connection failed: {e.message}")
        return 1
    print(f"Connection OK ({len(data.get('genres', []))} genres available)")
    return 0


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 0

    # Load configuration
    try:
        config = Config.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("\nMake sure your .env file contains:")
        print("  TMDB_API_KEY=<your_tmdb_api_key>")
        return 1

    if parsed_args.command == "serve":
        return cmd_serve(config, parsed_args)

    context = AppContext.from_config(config)
    try:
        if parsed_args.command == "search":
            return cmd_search(context, parsed_args)
        elif parsed_args.command == "test":
            return cmd_test(context)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled.")
        return 130
    finally:
        context.close()


if __name__ == "__main__":
    sys.exit(main())
