import sys

from switchfan.main import main

sys.exit(main())
