"""Unified CLI for paddock grazing and mob management.

Reads go to the backend unless --cached is given, in which case the last
snapshot downloaded with `farmhand sync` is used.
"""

import argparse
import asyncio

from farmhand.core import format_area, format_stocking_rate
from farmhand.data import cache, mob_events, mobs, team
from farmhand.data.mob_events import InvalidQuantityError
from farmhand.data.models import find_record, is_active
from farmhand.data.paddocks import get_paddock_name
from farmhand.grazing import movement, occupancy, population, stocking

STATUS_LABELS = {
    "grazing": "Grazing",
    "resting": "Resting",
    "never": "Never grazed",
}


async def _load_farm(args: argparse.Namespace) -> dict:
    """Snapshot of paddocks, mobs and grazing events from cache or backend."""
    if getattr(args, "cached", False):
        return cache.load_farm_snapshot()
    owner_id = await team.resolve_owner_id()
    return await cache.fetch_farm_snapshot(owner_id)


async def cmd_status(args: argparse.Namespace) -> None:
    """Show grazing status and stocking rate for every paddock."""
    farm = await _load_farm(args)
    rows = stocking.summarize_paddocks(farm["paddocks"], farm["mobs"], farm["grazing_events"])

    if not rows:
        print("No paddocks found.")
        return

    print(f"{'Paddock':<25} {'Area':>10}  {'Status':<14} {'Days':>5} {'Mobs':>5} {'DSE':>8}  {'Stocking'}")
    print("-" * 88)
    for row in sorted(rows, key=lambda r: r["paddock_name"].lower()):
        print(
            f"{row['paddock_name']:<25} "
            f"{format_area(row['area_m2']):>10}  "
            f"{STATUS_LABELS[row['status']]:<14} "
            f"{row['days']:>5} "
            f"{row['mob_count']:>5} "
            f"{row['total_dse']:>8.1f}  "
            f"{format_stocking_rate(row['stocking_rate'])}"
        )


async def cmd_mobs(args: argparse.Namespace) -> None:
    """List mobs with their paddock and days in paddock."""
    farm = await _load_farm(args)
    farm_mobs = farm["mobs"] if args.all else [m for m in farm["mobs"] if is_active(m)]

    if not farm_mobs:
        print("No mobs found.")
        return

    print(f"{'Mob':<20} {'Type':<10} {'Head':>6}  {'Paddock':<25} {'Days':>5}  {'Status'}")
    print("-" * 80)
    for mob in sorted(farm_mobs, key=lambda m: (m.get("name") or "").lower()):
        days = occupancy.get_days_in_paddock(mob["id"], farm["grazing_events"])
        print(
            f"{mob.get('name', '?'):<20} "
            f"{mob.get('livestock_type', '?'):<10} "
            f"{mob.get('size') or 0:>6}  "
            f"{get_paddock_name(mob.get('current_paddock_id'), farm['paddocks']):<25} "
            f"{'-' if days is None else days:>5}  "
            f"{mob.get('status', '?')}"
        )


async def cmd_history(args: argparse.Namespace) -> None:
    """Show a mob's population history from its event log."""
    owner_id = await team.resolve_owner_id()
    mob = find_record(args.mob, await mobs.get_mobs(owner_id, include_archived=True))
    events = await mob_events.get_mob_events(mob["id"], owner_id=owner_id)

    analytics = population.calculate_mob_analytics(mob, events)
    trade = population.summarize_sales(events)
    losses = population.summarize_losses(events)

    print("=" * 60)
    print(f"{mob['name']} ({mob.get('livestock_type', '?')}) - {mob.get('size') or 0} head")
    print("=" * 60)

    if not events:
        print("No events recorded.")
        return

    print(f"Initial size:  {analytics['initial_size']}")
    print(f"Births:        {analytics['total_births']} ({analytics['birth_rate']:.1f} per 100 head)")
    print(f"Sales:         {analytics['total_sales']}")
    print(f"Losses:        {analytics['total_losses']}")

    if trade["sales"]["head"]:
        avg = trade["sales"]["average_per_head"]
        avg_str = f" (avg ${avg:,.2f}/head)" if avg is not None else ""
        print(f"Sale revenue:  ${trade['sales']['total_value']:,.2f}{avg_str}")
    if trade["purchases"]["head"]:
        print(f"Purchases:     {trade['purchases']['head']} head, ${trade['purchases']['total_value']:,.2f}")
    if losses:
        print("Losses by reason:")
        for reason, count in sorted(losses.items(), key=lambda x: -x[1]):
            print(f"  {reason}: {count}")

    print(f"\n{'Date':<12} {'Event':<12} {'Size':>6}")
    print("-" * 32)
    for point in analytics["size_over_time"]:
        date_str = (point["date"] or "")[:10]
        print(f"{date_str:<12} {point['event']:<12} {point['size']:>6}")


async def cmd_move(args: argparse.Namespace) -> None:
    """Move a mob to another paddock (or out of all paddocks)."""
    owner_id = await team.resolve_owner_id()
    farm = await cache.fetch_farm_snapshot(owner_id)

    mob = find_record(args.mob, [m for m in farm["mobs"] if is_active(m)])
    new_paddock_id = None
    if not args.out:
        if not args.paddock:
            print("Error: give a paddock or --out")
            return
        new_paddock_id = find_record(args.paddock, farm["paddocks"])["id"]

    old_paddock_id = mob.get("current_paddock_id")
    # Read before moving; the open event is closed by the move
    days = occupancy.get_days_in_paddock(mob["id"], farm["grazing_events"]) or 0

    moved = await movement.move_mob(mob["id"], old_paddock_id, new_paddock_id, owner_id=owner_id)
    if not moved:
        print(f"Failed to move {mob['name']}")
        return

    old_name = get_paddock_name(old_paddock_id, farm["paddocks"])
    new_name = get_paddock_name(new_paddock_id, farm["paddocks"])
    print(f"Moved {mob['name']}: {old_name} -> {new_name}")
    if old_paddock_id:
        print(f"  {days} days in {old_name}")


async def cmd_event(args: argparse.Namespace) -> None:
    """Record a birth, sale, loss or purchase."""
    owner_id = await team.resolve_owner_id()
    mob = find_record(args.mob, await mobs.get_mobs(owner_id))

    try:
        if args.command == "birth":
            updated = await mob_events.record_birth(mob, args.quantity, owner_id=owner_id, notes=args.notes)
        elif args.command == "sale":
            updated = await mob_events.record_sale(
                mob,
                args.quantity,
                owner_id=owner_id,
                price_per_head=args.price,
                buyer_name=args.buyer,
                notes=args.notes,
            )
        elif args.command == "loss":
            updated = await mob_events.record_loss(
                mob, args.quantity, owner_id=owner_id, loss_reason=args.reason, notes=args.notes
            )
        else:
            updated = await mob_events.record_purchase(
                mob,
                args.quantity,
                owner_id=owner_id,
                price_per_head=args.price,
                notes=args.notes,
                age=args.age,
                avg_weight=args.weight,
                condition=args.condition,
            )
    except InvalidQuantityError as e:
        print(f"Error: {e}")
        return

    if updated is None:
        print(f"Failed to record {args.command} for {mob['name']}")
        return

    print(f"Recorded {args.command} of {args.quantity} for {mob['name']} - now {updated.get('size')} head")


async def cmd_sync(args: argparse.Namespace) -> None:
    """Download paddocks, mobs and grazing events to the local cache."""
    owner_id = await team.resolve_owner_id()
    print(f"Syncing farm {owner_id}...")
    await cache.sync_farm(owner_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="farmhand",
        description="Paddock grazing and mob management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  farmhand status                      Grazing status and stocking rate per paddock
  farmhand status --cached             Same, from the last sync
  farmhand mobs                        List active mobs
  farmhand history "Ewes 2024"         Mob population history
  farmhand move "Ewes 2024" "River"    Move a mob
  farmhand move "Ewes 2024" --out      Take a mob out of its paddock
  farmhand sale "Ewes 2024" 12 --price 180 --buyer "Saleyards"
  farmhand sync                        Download farm data to the local cache
""",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    status_parser = subparsers.add_parser("status", help="Paddock grazing status and stocking rate")
    status_parser.add_argument("--cached", action="store_true", help="Use the last synced snapshot")

    mobs_parser = subparsers.add_parser("mobs", help="List mobs")
    mobs_parser.add_argument("--all", action="store_true", help="Include archived mobs")
    mobs_parser.add_argument("--cached", action="store_true", help="Use the last synced snapshot")

    history_parser = subparsers.add_parser("history", help="Mob population history")
    history_parser.add_argument("mob", help="Mob id or name")

    move_parser = subparsers.add_parser("move", help="Move a mob to another paddock")
    move_parser.add_argument("mob", help="Mob id or name")
    move_parser.add_argument("paddock", nargs="?", help="Destination paddock id or name")
    move_parser.add_argument("--out", action="store_true", help="Take the mob out of its paddock")

    for name, help_text in (
        ("birth", "Record births"),
        ("sale", "Record a sale"),
        ("loss", "Record deaths/losses"),
        ("purchase", "Record bought-in head"),
    ):
        event_parser = subparsers.add_parser(name, help=help_text)
        event_parser.add_argument("mob", help="Mob id or name")
        event_parser.add_argument("quantity", type=int, help="Number of head")
        event_parser.add_argument("--notes", help="Free-text notes")
        if name in ("sale", "purchase"):
            event_parser.add_argument("--price", type=float, help="Price per head")
        if name == "sale":
            event_parser.add_argument("--buyer", help="Buyer name")
        if name == "loss":
            event_parser.add_argument("--reason", help="Loss reason")
        if name == "purchase":
            event_parser.add_argument("--age", help="Age at purchase (years)")
            event_parser.add_argument("--weight", help="Average weight (kg)")
            event_parser.add_argument("--condition", help="Body condition")

    subparsers.add_parser("sync", help="Download farm data to the local cache")

    return parser


async def cli_main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Dispatch to command handlers
    commands = {
        "status": cmd_status,
        "mobs": cmd_mobs,
        "history": cmd_history,
        "move": cmd_move,
        "birth": cmd_event,
        "sale": cmd_event,
        "loss": cmd_event,
        "purchase": cmd_event,
        "sync": cmd_sync,
    }

    if args.command not in commands:
        parser.print_help()
        return

    try:
        await commands[args.command](args)
    except ValueError as e:
        print(f"Error: {e}")
    except FileNotFoundError:
        print("No cached farm data. Run `farmhand sync` first.")


def cli() -> None:
    """CLI entry point."""
    asyncio.run(cli_main())


if __name__ == "__main__":
    cli()
