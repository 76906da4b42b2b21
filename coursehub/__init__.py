"""
CourseHub Admissions
Student course applications to institutions.

Architecture:
- Pure rules: eligibility, quota, admission exclusivity, lifecycle, aggregation
- AdmissionsService: atomic submission and compare-and-swap transitions
- Document store: MongoDB in deployments, in-memory for dev/tests
"""

__version__ = "1.0.0"
