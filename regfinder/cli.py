# regfinder/cli.py
import argparse
import logging
import sys

from .errors import RegFinderError
from .pipeline import RegisterSearch


def main(argv=None):
    parser = argparse.ArgumentParser(description="Register candidate search for gate-level netlists")
    parser.add_argument("-c", "--config", required=True, help="YAML config file")
    parser.add_argument("-o", "--out-prefix", default="out", help="Output prefix")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        search = RegisterSearch.from_file(args.config)
        search.run(out_prefix=args.out_prefix)
    except RegFinderError as e:
        logging.getLogger(__name__).error("register search failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
