import argparse
import json
from typing import List, Optional

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from scoresheet.clients.dict_client import DictClient, DictClientError
from scoresheet.models.enums import Category, CompetitionLevel, RegistrationResult
from scoresheet.normalization.normalizer import AliasNormalizer
from scoresheet.normalization.text import canonicalize
from scoresheet.resolution.resolver import ReferenceResolver
from scoresheet.storage.alias_registry import AliasRegistry
from scoresheet.storage.alias_store import AliasStore
from scoresheet.storage.errors import StorageError
from scoresheet.storage.unknown_registry import UnknownRegistry

console = Console()

CATEGORY_CHOICES = [c.value for c in Category]
LEVEL_CHOICES = [lvl.value for lvl in CompetitionLevel]

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFLICT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scoresheet",
        description="Alias registry and name-resolution helper.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register", help="Stage an alias in the local layer.")
    p.add_argument("category", choices=CATEGORY_CHOICES)
    p.add_argument("raw")
    p.add_argument("canonical")
    p.add_argument("--source", help="Where the alias was observed (URL).")
    p.add_argument("--note", help="Free-form note for the registration log.")
    p.add_argument("--overwrite", action="store_true")

    p = sub.add_parser("resolve", help="Look up an alias in the alias store.")
    p.add_argument("category", choices=CATEGORY_CHOICES)
    p.add_argument("raw")
    p.add_argument("--layer", choices=["merged", "base", "local"], default="merged")

    sub.add_parser("promote", help="Move local aliases into the base layer.")

    p = sub.add_parser("pending", help="Report unresolved names by category.")
    p.add_argument("category", nargs="?", choices=CATEGORY_CHOICES)
    p.add_argument("--examples", type=int, default=3)
    p.add_argument("--all", action="store_true", help="Include resolved names.")
    p.add_argument("--json", action="store_true", help="Emit NDJSON.")

    p = sub.add_parser("mark-resolved", help="Drop a name from pending reports.")
    p.add_argument("category", choices=CATEGORY_CHOICES)
    p.add_argument("raw")
    p.add_argument("--canonical")
    p.add_argument("--note")

    p = sub.add_parser("lookup", help="Resolve a name against the dictionary API.")
    p.add_argument("kind", choices=["team", "stadium", "club"])
    p.add_argument("raw")
    p.add_argument("--level", choices=LEVEL_CHOICES, default="First")

    return parser


def cmd_register(args: argparse.Namespace) -> int:
    store = AliasStore.from_settings()
    registry = AliasRegistry.from_settings(store=store)
    meta = {k: v for k, v in (("source", args.source), ("note", args.note)) if v}
    result = registry.register(
        args.category, args.raw, args.canonical, meta, overwrite=args.overwrite
    )
    console.print(
        f"[{result.value}] {args.category}: {args.raw} => {args.canonical}",
        markup=False,
    )
    if result == RegistrationResult.CONFLICT:
        stored = store.load_local().get(args.category, {})
        console.print(
            f"[yellow]Already staged as '{escape(str(stored.get(canonicalize(args.raw))))}'. "
            f"Use --overwrite to replace it.[/yellow]"
        )
        return EXIT_CONFLICT
    UnknownRegistry.from_settings().mark_resolved(
        args.category, args.raw, canonical=args.canonical, note=args.note
    )
    return EXIT_OK


def cmd_resolve(args: argparse.Namespace) -> int:
    store = AliasStore.from_settings()
    if args.layer == "base":
        layer = store.load_base()
    elif args.layer == "local":
        layer = store.load_local()
    else:
        layer = store.load()
    # Canonicalized fallback stays within the requested layer
    found = layer.get(args.category, {}).get(args.raw)
    if found is None:
        found = AliasNormalizer(layer).normalize_by(args.category, args.raw)
    console.print(found if found is not None else "(not found)", markup=False)
    return EXIT_OK


def cmd_promote(args: argparse.Namespace) -> int:
    registry = AliasRegistry.from_settings(store=AliasStore.from_settings())
    report = registry.promote()
    if not report.promoted:
        console.print("Nothing to promote.")
        return EXIT_OK
    table = Table(title=f"Promoted {len(report)} aliases")
    table.add_column("category")
    table.add_column("raw")
    table.add_column("canonical")
    table.add_column("previous")
    for rec in report.promoted:
        table.add_row(
            rec.category, escape(rec.raw), escape(rec.canonical), escape(rec.previous or "")
        )
    console.print(table)
    return EXIT_OK


def cmd_pending(args: argparse.Namespace) -> int:
    registry = UnknownRegistry.from_settings()
    categories = [args.category] if args.category else CATEGORY_CHOICES
    for category in categories:
        summaries = registry.pending(
            category, max_examples=args.examples, include_resolved=args.all
        )
        if args.json:
            for s in summaries:
                print(json.dumps(s.model_dump(mode="json"), ensure_ascii=False))
            continue
        if not summaries:
            continue
        table = Table(title=f"{category} ({len(summaries)} pending)")
        table.add_column("raw")
        table.add_column("count", justify="right")
        table.add_column("last seen")
        table.add_column("example")
        for s in summaries:
            example = s.examples[0] if s.examples else {}
            table.add_row(
                escape(s.raw),
                str(s.count),
                s.last_seen.isoformat() if s.last_seen else "",
                escape(str(example.get("url", ""))),
            )
        console.print(table)
    return EXIT_OK


def cmd_mark_resolved(args: argparse.Namespace) -> int:
    UnknownRegistry.from_settings().mark_resolved(
        args.category, args.raw, canonical=args.canonical, note=args.note
    )
    console.print(f"Marked {args.category}: {args.raw} as resolved", markup=False)
    return EXIT_OK


def cmd_lookup(args: argparse.Namespace) -> int:
    with DictClient.from_settings() as client:
        catalog = client.load_catalog()
    resolver = ReferenceResolver(
        catalog, AliasNormalizer.from_store(AliasStore.from_settings())
    )
    if args.kind == "team":
        resolved = resolver.resolve_team(args.raw, args.level)
    elif args.kind == "stadium":
        resolved = resolver.resolve_stadium(args.raw)
    else:
        resolved = resolver.resolve_club(args.raw)
    console.print(
        Panel(
            f"raw: {escape(resolved.raw_name)}\n"
            f"id: {resolved.ref_id if resolved.is_resolved else 'no match'}\n"
            f"name: {escape(resolved.canonical_name or 'N/A')}",
            title=f"{args.kind} lookup",
        )
    )
    return EXIT_OK


COMMANDS = {
    "register": cmd_register,
    "resolve": cmd_resolve,
    "promote": cmd_promote,
    "pending": cmd_pending,
    "mark-resolved": cmd_mark_resolved,
    "lookup": cmd_lookup,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return COMMANDS[args.command](args)
    except (StorageError, DictClientError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_ERROR
