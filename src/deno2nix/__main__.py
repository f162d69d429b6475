import sys

from deno2nix.cli import main

sys.exit(main())
