"""
Project Pulse - Derived Metrics and Activity Aggregation

This package turns raw project data into the values a project dashboard shows.

Package Structure:
    - core: Infrastructure (logging, secure configuration)
    - domain: Domain models (activity, metrics, checklist, project, insights)
    - dashboards: Activity feed and trend calculations
    - ml: Health scoring and insight rules
    - scheduler: Recurring re-check scheduling
    - analytics: Entry points for the surrounding application
"""

__version__ = "1.0.0"
__author__ = "Project Pulse Team"
