"""Sales reporting endpoints for the tobacco inventory service

This module provides the aggregated sales reports of the dashboard:
summaries by date range, period, station and buyer, the farmers detailed
statement, the filtered inventory listing and the comprehensive sales
schedule with commission and loan deductions.

Every report endpoint answers JSON by default and a downloadable PDF or
print-ready HTML document with ``format=pdf`` / ``format=html``. Handlers
delegate to service functions that contain the actual business logic."""
