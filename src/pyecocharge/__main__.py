from pyecocharge.cli import main

raise SystemExit(main())
