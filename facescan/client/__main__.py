"""Allow ``python -m facescan.client``."""

import sys

from facescan.client.cli import main

sys.exit(main())
