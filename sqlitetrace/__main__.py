import sys

from sqlitetrace.cli import main


sys.exit(main())
