
from .finder import CandidateFinder, SearchOptions, find_candidates

__all__ = ["CandidateFinder", "SearchOptions", "find_candidates"]
