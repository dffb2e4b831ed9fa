from cryptremote.cli import main

raise SystemExit(main())
