"""CLI entry point for Spark."""
import argparse
import sys

from spark.app.config import get_settings
from spark.app.logging import setup_logging
from spark.app.paths import ensure_dirs
from spark.storage.db import init_db
from spark.thinking.models import LLMError


def cmd_serve(args):
    """Start the web server."""
    import uvicorn
    from spark.web.server import app

    settings = get_settings()
    port = args.port or settings.web_port
    host = settings.web_host

    print(f"Starting server at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


def cmd_ideas(args):
    """List, create, or archive ideas."""
    from spark.ideas import service

    if args.action == "new":
        if not args.title:
            print("Provide --title for a new idea")
            return 1
        idea = service.create_idea(args.title)
        print(f"Idea created: {idea.id}  {idea.title}")
    elif args.action == "archive":
        if not args.id:
            print("Provide --id to archive")
            return 1
        service.archive_idea(args.id)
        print(f"Archived {args.id}")
    else:
        ideas = service.list_ideas(status=args.status)
        if not ideas:
            print("No ideas yet.")
            return 0
        for idea in ideas:
            count = len(service.list_elements(idea.id))
            print(f"  {idea.id}  {idea.title}  ({count} elements, {idea.status})")
    return 0


def cmd_add(args):
    """Quick add a thought or link."""
    from spark.ideas import service

    element = service.quick_add(args.text, idea_id=args.idea, drawer=args.drawer)
    print(f"Added {element.type}: {element.id}")
    return 0


def cmd_spark(args):
    """Fire a spark at an idea and print the reply."""
    from spark.thinking.agent import SparkRequest, run_spark

    result = run_spark(SparkRequest(
        spark_type=args.type,
        idea_id=args.idea,
        custom_prompt=args.prompt,
    ))
    print(result.content)
    return 0


def cmd_scouts(args):
    """Generate scouts for a set of topics."""
    from spark.scouts.generator import generate_scouts

    zones = args.zones or ", ".join(get_settings().get_default_zones())
    for scout in generate_scouts(zones):
        print(f"  [{scout.zone}] {scout.title}")
    return 0


def main():
    setup_logging()
    ensure_dirs()
    init_db()

    parser = argparse.ArgumentParser(
        prog="spark",
        description="Spark: a thinking partner for developing ideas",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = subparsers.add_parser("serve", help="Start web server")
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    # ideas
    p_ideas = subparsers.add_parser("ideas", help="Manage ideas")
    p_ideas.add_argument("action", nargs="?", default="list", choices=["list", "new", "archive"])
    p_ideas.add_argument("--title", default=None)
    p_ideas.add_argument("--id", default=None)
    p_ideas.add_argument("--status", default="active", choices=["active", "archived"])
    p_ideas.set_defaults(func=cmd_ideas)

    # add
    p_add = subparsers.add_parser("add", help="Quick add a thought or link")
    p_add.add_argument("text")
    p_add.add_argument("--idea", default=None, help="File under this idea id")
    p_add.add_argument("--drawer", action="store_true", help="Put unfiled item in the Drawer")
    p_add.set_defaults(func=cmd_add)

    # spark
    p_spark = subparsers.add_parser("spark", help="Ask Spark about an idea")
    p_spark.add_argument("--idea", required=True)
    p_spark.add_argument(
        "--type", default="synthesize",
        choices=["synthesize", "challenge", "expand", "so_what", "custom"],
    )
    p_spark.add_argument("--prompt", default=None, help="Prompt for --type custom")
    p_spark.set_defaults(func=cmd_spark)

    # scouts
    p_scouts = subparsers.add_parser("scouts", help="Generate scouts")
    p_scouts.add_argument("--zones", default=None, help="Comma-separated topics")
    p_scouts.set_defaults(func=cmd_scouts)

    args = parser.parse_args()
    try:
        code = args.func(args)
    except (LookupError, ValueError, LLMError) as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    sys.exit(code or 0)


if __name__ == "__main__":
    main()
