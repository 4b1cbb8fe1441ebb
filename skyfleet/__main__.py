"""Terminal front-end for the fleet simulation core.

Example:
    $ python -m skyfleet fleet --city paris --watch 30
    $ python -m skyfleet driver --rides 2 --speed 10
    $ python -m skyfleet history --today
"""

import argparse
from pathlib import Path

from rich.live import Live
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from skyfleet.config import PROGRESS_TICK
from skyfleet.data import CITIES
from skyfleet.log import CONSOLE, configure_logging
from skyfleet.mission import generate_mock_history
from skyfleet.simulator import DriverSession, FleetDashboard, RideState
from skyfleet.storage import CompletedRideStore, JsonFileStorage
from skyfleet.timer import RealtimeScheduler
from skyfleet.unit import Second

DEFAULT_STORAGE = Path.home() / ".skyfleet" / "storage.json"


def fleet_table(dashboard: FleetDashboard) -> Table:
    city = dashboard.active_city
    counts = dashboard.category_counts
    table = Table(
        title=f"{city.name} fleet",
        caption=" • ".join(f"{category.value}: {count}" for category, count in counts.items()),
    )
    table.add_column("Drone", style="bold")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Battery", justify="right")
    table.add_column("Range", justify="right")
    table.add_column("Load", justify="right")
    table.add_column("Trip")
    table.add_column("Progress", justify="right")

    progress = dashboard.progress_map
    for drone in dashboard.sorted_displayed_drones:
        status = drone.status_display
        trip = f"{drone.trip.origin} → {drone.trip.destination}" if drone.trip else "-"
        table.add_row(
            drone.id,
            drone.name,
            f"[{status.color}]{status.text}[/]",
            f"{drone.battery}%",
            f"{drone.range_km} km",
            f"{drone.load}/{drone.capacity}",
            trip,
            f"{progress[drone.id]:.0%}" if drone.id in progress else "-",
        )
    return table


def cmd_fleet(args: argparse.Namespace, storage: JsonFileStorage) -> int:
    scheduler = RealtimeScheduler(speed=args.speed)
    dashboard = FleetDashboard(storage, scheduler=scheduler)
    try:
        dashboard.select_city(args.city)
        for name in args.hide:
            dashboard.toggle_category(name)
        dashboard.set_critical_battery_filter(args.critical)

        if args.watch <= 0:
            CONSOLE.print(fleet_table(dashboard))
            return 0

        with Live(fleet_table(dashboard), console=CONSOLE, auto_refresh=False) as live:
            token = scheduler.schedule(PROGRESS_TICK, lambda: live.update(fleet_table(dashboard), refresh=True))
            scheduler.run_for(Second(args.watch))
            token.cancel()
    finally:
        dashboard.close()
    return 0


def cmd_driver(args: argparse.Namespace, storage: JsonFileStorage) -> int:
    scheduler = RealtimeScheduler(speed=args.speed)
    session = DriverSession(scheduler, storage)
    completed: list[int] = []

    def autopilot() -> None:
        if session.state is not RideState.NOTIFIED:
            return
        if session.can_accept and not session.is_charging:
            session.accept()
        elif session.needs_charge:
            session.start_charging()

    def on_state(state: RideState) -> None:
        if state is RideState.COMPLETED:
            completed.append(1)
            ride = session.last_completed_ride
            CONSOLE.print(f"[green]Ride complete[/] {ride.origin} → {ride.destination}, battery {session.battery}%")

    remove = session.add_listener(on_state)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(bar_width=40),
        TaskProgressColumn(),
        console=CONSOLE,
        auto_refresh=True,
    ) as progress:
        task = progress.add_task("Waiting for rides", total=1.0)

        def refresh() -> None:
            offer = session.offer
            if session.driver_drone is not None and offer is not None:
                description = f"[cyan]{offer.trip.origin} → {offer.trip.destination} ({offer.passengers} pax)"
            elif session.is_charging:
                description = f"[yellow]Charging {session.battery}%"
            else:
                description = f"{session.waiting_label} • battery {session.battery}%"
            progress.update(task, description=description, completed=session.progress)

        tokens = [scheduler.schedule(Second(1), autopilot), scheduler.schedule(PROGRESS_TICK, refresh)]
        try:
            session.start()
            scheduler.run_until(lambda: len(completed) >= args.rides)
        finally:
            for token in tokens:
                token.cancel()
            remove()
            session.close()
    return 0


def cmd_history(args: argparse.Namespace, storage: JsonFileStorage) -> int:
    if args.drone:
        table = Table(title=f"Flight history of {args.drone}")
        for column in ("When", "From", "To", "Duration", "Status"):
            table.add_column(column)
        for record in generate_mock_history(args.drone):
            table.add_row(record.time, record.origin, record.destination, record.duration, record.status)
        CONSOLE.print(table)
        return 0

    store = CompletedRideStore(storage)
    rides = store.today() if args.today else store.rides()
    table = Table(title="Completed rides", caption=f"{len(rides)} rides")
    for column in ("Completed", "Drone", "From", "To", "Pax", "ETA"):
        table.add_column(column)
    for ride in rides:
        table.add_row(
            ride.completed_at.astimezone().strftime("%Y-%m-%d %H:%M"),
            ride.drone_name,
            ride.origin,
            ride.destination,
            str(ride.passengers),
            ride.eta or "-",
        )
    CONSOLE.print(table)
    return 0


def cmd_battery(args: argparse.Namespace, storage: JsonFileStorage) -> int:
    dashboard = FleetDashboard(storage)
    try:
        dashboard.update_battery(args.drone, args.level)
        level = dashboard.overrides.get(args.drone)
    finally:
        dashboard.close()
    if level is None:
        CONSOLE.print(f"[red]Unknown drone {args.drone}")
        return 1
    CONSOLE.print(f"{args.drone} battery set to {level}%")
    return 0


def cmd_reset_batteries(args: argparse.Namespace, storage: JsonFileStorage) -> int:
    dashboard = FleetDashboard(storage)
    dashboard.reset_batteries()
    dashboard.close()
    CONSOLE.print("Battery overrides cleared")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skyfleet", description="Drone taxi fleet simulation")
    parser.add_argument("--storage", type=Path, default=DEFAULT_STORAGE, help="JSON file holding persisted state")
    parser.add_argument("-v", "--verbose", action="store_true", help="show debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    fleet = sub.add_parser("fleet", help="show a city's fleet")
    fleet.add_argument("--city", choices=[city.id for city in CITIES], default=CITIES[0].id)
    fleet.add_argument("--hide", action="append", default=[], choices=["active", "ready", "lowBat"], help="hide a category")
    fleet.add_argument("--critical", action="store_true", help="only drones below 20%% battery")
    fleet.add_argument("--watch", type=float, default=0, help="animate trips for this many seconds")
    fleet.add_argument("--speed", type=float, default=1.0, help="simulated seconds per real second")
    fleet.set_defaults(func=cmd_fleet)

    driver = sub.add_parser("driver", help="fly the simulated driver through ride offers")
    driver.add_argument("--rides", type=int, default=1, help="rides to complete before exiting")
    driver.add_argument("--speed", type=float, default=1.0, help="simulated seconds per real second")
    driver.set_defaults(func=cmd_driver)

    history = sub.add_parser("history", help="list completed rides")
    history.add_argument("--today", action="store_true", help="only rides completed today")
    history.add_argument("--drone", help="show the mock flight history of a drone instead")
    history.set_defaults(func=cmd_history)

    battery = sub.add_parser("battery", help="override a drone's battery level")
    battery.add_argument("drone")
    battery.add_argument("level", type=int)
    battery.set_defaults(func=cmd_battery)

    reset = sub.add_parser("reset-batteries", help="clear every battery override")
    reset.set_defaults(func=cmd_reset_batteries)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    storage = JsonFileStorage(args.storage)
    return args.func(args, storage)


if __name__ == "__main__":
    raise SystemExit(main())
