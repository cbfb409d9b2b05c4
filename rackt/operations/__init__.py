"""
Operations Layer

Business logic that composes document-store transactions into workflows.
Each operations module focuses on a specific domain:
- PlayerOperations: Player registration and rating lookups
- MatchOperations: Ranked match reporting and head-to-head history
- TournamentOperations: Tournament creation and bracket progression
"""
