from workspace_check.cli import main

raise SystemExit(main())
