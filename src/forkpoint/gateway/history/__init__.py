"""Commit history gateway.

Import from submodules:
- abc: HistoryRepository
- real: RealHistoryRepository
- fake: FakeHistoryRepository
- types: CommitId, CommitMetadata, WalkOrder and the non-ideal-state results
"""
