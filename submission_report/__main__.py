"""Allow ``python -m submission_report``."""

import sys

from submission_report.cli import main

if __name__ == "__main__":
    sys.exit(main())
