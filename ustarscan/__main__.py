import sys

from ustarscan.main import main

sys.exit(main())
