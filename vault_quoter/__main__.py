"""Allow running the package as a module: python -m vault_quoter"""

import sys

from vault_quoter.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
