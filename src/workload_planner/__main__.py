import sys
from workload_planner.cli import main

sys.exit(main())
