from pkg_repair.cli import main

raise SystemExit(main())
