"""v1 router package — all /api/v1/* endpoints live here.

Files:
  timeline.py  — Stage administration, live status, eligibility decisions
  catalog.py   — Positions and candidates
  voters.py    — Registration intake, voter status, verification hook
  aspirants.py — Candidacy applications and admin review
  votes.py     — Ballot submission and recovery
  results.py   — Published results and turnout
  audit.py     — Audit log listing
  admin.py     — Tally reconciliation, the reconciliation queue and its sweep

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to evote/services/.
"""
