import sys

from qreate.cli import main

sys.exit(main())
