"""
Runner 진입점

실행 방법:
    python -m runner program.json --accounts accounts.yaml
"""

import sys

from runner.bootstrap import main

if __name__ == "__main__":
    sys.exit(main())
