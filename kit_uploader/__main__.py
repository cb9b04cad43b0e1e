import sys

from kit_uploader.cli import main

sys.exit(main())
