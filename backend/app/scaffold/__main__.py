import sys

from app.scaffold.cli import main

sys.exit(main())
