from versionnumber.cli import main

raise SystemExit(main())
