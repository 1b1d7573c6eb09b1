import sys

from borderline.cli import main

sys.exit(main())
