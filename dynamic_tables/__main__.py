import sys

from dynamic_tables.cli import main

sys.exit(main())
