import sys

from sharpfind.main import main

sys.exit(main())
