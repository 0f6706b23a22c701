"""PageGrade Landing Page Analyzer - Worker Package."""
