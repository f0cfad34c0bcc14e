import sys

from src.bwplotter.cli import main

if __name__ == "__main__":
    sys.exit(main())
