"""Services package — all business logic lives here, never in routers.

Files:
  timeline.py        — Pure status derivation, StageCatalog, TimelineService
  eligibility.py     — Action gate over a TimelineStatus
  voting.py          — Vote transaction coordinator and ballot validation
  results.py         — Result aggregation and turnout
  tally.py           — vote_count reconciliation against vote rows
  monitor.py         — Timeline monitor (change feed + periodic refresh)
  stage.py           — Stage administration
  catalog.py         — Positions and candidates
  voter.py           — Voter intake, verification hook, recovery status
  reconciliation.py  — Operator reconciliation queue
  audit.py           — Audit log writer and listing

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
