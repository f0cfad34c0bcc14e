import argparse
import logging
import sys

from .constants import DEFAULT_URL, DEFAULT_RATE_CEILING
from .asyncio_thread import ProducerThreadError
from .core import BandwidthPlotter
from .exceptions import InitializationError
from .gui import create_gui

USAGE = "Usage : bandwidth-plotter <url> <output filename>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bandwidth-plotter", description="Plot the bandwidth of a download in real time.")
    parser.add_argument("url", nargs="?", default=DEFAULT_URL)
    parser.add_argument("output_file", nargs="?", default=None, help="Write the downloaded bytes here. Discarded when omitted.")
    parser.add_argument("--initial-ceiling", type=float, default=DEFAULT_RATE_CEILING, help="Initial Y axis maximum in KB/s.")
    parser.add_argument("--font", default=None, help="Preferred font family.")
    parser.add_argument("--debug", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)
    logging.info(USAGE)

    if args.initial_ceiling <= 0:
        logging.error(f"--initial-ceiling must be positive, got {args.initial_ceiling}")
        return -1

    try:
        gui = create_gui(args.font)
    except InitializationError as err:
        logging.error(f"Cannot initialize application correctly. {err}")
        return -1

    try:
        plotter = BandwidthPlotter(gui, args.url, args.output_file, initial_rate_ceiling=args.initial_ceiling)
        plotter.open()
    except (InitializationError, ProducerThreadError, ValueError) as err:
        logging.error(f"Cannot initialize application correctly. {err}")
        gui.close()
        return -1

    return plotter.run()


if __name__ == "__main__":
    sys.exit(main())
