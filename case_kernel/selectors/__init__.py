"""Read-only selectors for the case kernel."""

from case_kernel.selectors.case_selector import CaseSelector, CaseSummary

__all__ = [
    "CaseSelector",
    "CaseSummary",
]
