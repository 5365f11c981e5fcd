import argparse
import asyncio
import logging
import signal

from gi.events import GLibEventLoopPolicy
from gi.repository import GLib

from fitness_map.ui import FitnessMapUI


def main():
    parser = argparse.ArgumentParser(description="Fitness Map")
    parser.add_argument(
        "--test",
        action="store_true",
        help="Use the configured home position instead of asking for the current location.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # asyncio on top of the GLib main loop so the position lookup can be awaited
    asyncio.set_event_loop_policy(GLibEventLoopPolicy())

    app = FitnessMapUI(test_mode=args.test)

    # Convert Unix signals to a graceful quit so do_shutdown() runs
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGINT,  lambda *a: (app.quit(), False)[1])
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGTERM, lambda *a: (app.quit(), False)[1])

    app.run(None)


if __name__ == "__main__":
    main()
