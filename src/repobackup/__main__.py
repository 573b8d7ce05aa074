import sys

from repobackup.main import main

sys.exit(main())
