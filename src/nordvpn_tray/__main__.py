"""Allow running the tray with ``python -m nordvpn_tray``."""

import sys

from nordvpn_tray.main import main

sys.exit(main())
