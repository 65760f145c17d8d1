import sys

from wordchain.cli import main

sys.exit(main())
