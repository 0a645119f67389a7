import sys

from timeslice.cli import main

sys.exit(main())
