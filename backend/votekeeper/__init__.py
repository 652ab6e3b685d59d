"""
Votekeeper - multi-round ballot sessions with delegation, quorum gating
and one-shot finalization.
"""
__version__ = "1.0.0"
