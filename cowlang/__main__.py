from .cow_cli import main

raise SystemExit(main())
