"""Allow ``python -m ai_client``."""

from ai_client.cli import main

raise SystemExit(main())
