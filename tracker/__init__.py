"""
tracker - Batch Courier Tracking Query
======================================

A Python package that queries a courier-tracking API for every shipment
listed in an Excel workbook and writes the annotated results back.

Modules:
--------
- config.py      : Configuration management (loads settings from .env)
- loader.py      : Input workbook loading
- models.py      : Request, result and report row types
- http_client.py : Signed HTTP client for the tracking API
- status.py      : State code labels
- traces.py      : Trace event selection (pickup, dispatch, delivery, problem)
- classifier.py  : Builds one report row per shipment
- report.py      : Writes the report workbook
- run_batch.py   : Main entry point and orchestration

Usage:
------
    python -m tracker.run_batch -f shipments.xlsx
    python -m tracker.run_batch -f shipments.xlsx --retry
    python -m tracker.run_batch -f shipments.xlsx --debug

Workflow:
---------
1. Load configuration from .env file
2. Read the shipment list (first and last rows are skipped)
3. For each row, query the tracking API
4. Write the report over the input workbook

Output:
-------
The sheet is rewritten with a header row, one row per successfully queried
shipment, and a footer row with the start and end time of the run.
"""
