import sys

from filmstamp.cli import main

sys.exit(main())
