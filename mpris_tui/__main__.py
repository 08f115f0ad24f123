import sys

from mpris_tui.app import main

sys.exit(main())
