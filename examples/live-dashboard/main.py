"""Live Dashboard — desk-live terminal demo.

Wires an in-memory training state, a LiveFeed on a real ThreadTimer and the
consumer reducers, then prints the merged dashboard state as updates
arrive. Halfway through, the model is "trained" so heatmap updates start
flowing, and an at-risk ticket is pushed through the same bus.

Run:
    python main.py --interval 0.5 --seconds 6
"""
from __future__ import annotations

import argparse
import logging
import time

from desk_live import (
    Channel,
    DataDistribution,
    HeatmapGrid,
    KpiBoard,
    LiveFeed,
    LiveFeedConfig,
    SlaBreachTicket,
    SlaTicketFeed,
    TrainingStateStore,
)

CATEGORIES = ("FI", "MM", "SD", "HR", "BASIS")
WEIGHTS = (120.0, 80.0, 60.0, 25.0, 15.0)
PRIORITIES = ("Low", "Medium", "High", "Critical")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Live Dashboard — desk-live demo")
    p.add_argument("--interval", type=float, default=0.5, help="seconds between ticks")
    p.add_argument("--seconds", type=float, default=6.0, help="how long to run")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--verbose", action="store_true", help="log every published delta")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    store = TrainingStateStore()
    feed = LiveFeed(store, LiveFeedConfig(interval=args.interval), seed=args.seed)

    board = KpiBoard({"deflectionRate": 0.0, "avgTimeToResolution": 0.0})
    grid = HeatmapGrid((c, p, 0) for c in CATEGORIES for p in PRIORITIES)
    tickets = SlaTicketFeed()
    board.attach(feed)
    grid.attach(feed)
    tickets.attach(feed)
    feed.subscribe(Channel.KPI_UPDATE, lambda delta: print(f"KPI   {board.values}"))
    feed.subscribe(
        Channel.HEATMAP_UPDATE,
        lambda delta: print(f"HEAT  {delta.category}/{delta.priority} -> "
                            f"{grid.value(delta.category, delta.priority)}"),
    )

    print(f"seed={feed.seed}")
    with feed:
        time.sleep(args.seconds / 2)
        print("--- model trained ---")
        store.train(DataDistribution(CATEGORIES, WEIGHTS, PRIORITIES))
        feed.emit_new_ticket(SlaBreachTicket("INC-40213", "Critical", "45m"))
        time.sleep(args.seconds / 2)

    print("\nHeatmap totals:")
    for category in CATEGORIES:
        row = "  ".join(f"{p[:4]}={grid.value(category, p)}" for p in PRIORITIES)
        print(f"  {category:<6} {row}")
    print("At-risk tickets:", [e.ticket.ticket_no for e in tickets.entries()])


if __name__ == "__main__":
    main()
