"""Entry point for style-shifter."""

import sys
import traceback

from style_shifter.cli import main


def run() -> None:
    """Run the command line with standard Python tracebacks."""
    try:
        code = main()
    except Exception:
        # Print standard Python traceback instead of a log record
        traceback.print_exc()
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    run()
