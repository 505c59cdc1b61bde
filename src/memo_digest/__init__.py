"""memo-digest: heuristic post-processing of voice-memo transcripts."""

__version__ = "0.1.0"
