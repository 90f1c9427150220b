"""
Entry point for running jobinsight.scripts.analyze as a module.

This allows the script to be run as:
    python -m jobinsight.scripts --jobs listings.json
"""

import sys
from jobinsight.scripts.analyze import main

if __name__ == "__main__":
    sys.exit(main())
