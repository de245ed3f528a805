import sys

from strictstrings.cli import main

sys.exit(main())
