"""Site progress upload validation and reporting.

Validates loosely structured construction-site spreadsheets (work-item
catalogs, daily quantity / man-hour uploads, monthly work schedules) into typed
records and aggregates accepted entries into daily, weekly, monthly and
cumulative rollups with an efficiency KPI.
"""

__version__ = "0.1.0"
