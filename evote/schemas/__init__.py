"""Pydantic schemas package.

Folder intent:
  common.py   — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  stage.py    — Stage CRUD, timeline status and eligibility decisions
  catalog.py  — Positions and candidates (no vote counts)
  aspirant.py — Candidacy applications and their review
  voter.py    — Voter intake and status
  vote.py     — Ballot submission
  results.py  — Per-position results and turnout
  audit.py    — Audit log, reconciliation queue and tally corrections
"""
