import sys

from tidygate.tidygate import main

sys.exit(main())
