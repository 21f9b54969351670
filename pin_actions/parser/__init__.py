from .workflow_parser import Occurrence, extract_occurrences, extract_actions, compute_line_col

__all__ = ["Occurrence", "extract_occurrences", "extract_actions", "compute_line_col"]
