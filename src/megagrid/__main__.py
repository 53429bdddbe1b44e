import sys

from megagrid.cli import main


if __name__ == "__main__":
    sys.exit(main())
