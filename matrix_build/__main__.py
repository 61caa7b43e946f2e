"""Allows ``python -m matrix_build``"""

import sys

from .main import main

sys.exit(main())
