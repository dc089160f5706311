"""Allow `python -m order_workflow`."""

from order_workflow.main import main

raise SystemExit(main())
