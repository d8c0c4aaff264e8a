import sys

from git_branch_manager.cli import main

sys.exit(main())
