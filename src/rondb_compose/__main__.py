from rondb_compose.cli import main

raise SystemExit(main())
