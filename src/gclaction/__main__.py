from gclaction.cli import main

raise SystemExit(main())
