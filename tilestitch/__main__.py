import sys

from tilestitch.cli import main


sys.exit(main())
