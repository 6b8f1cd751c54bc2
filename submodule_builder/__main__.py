from submodule_builder.cli import main

raise SystemExit(main())
