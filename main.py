#!/usr/bin/env python3

"""
main.py

Archives the configured files and directories into tar.gz bundles and pushes them
to a git repository. Runs the interactive menu, a single backup (--backup), or the
scheduler loop (--daemon).
"""

import sys

from repobackup.main import main

if __name__ == "__main__":
    sys.exit(main())
