"""Sale records endpoints for the tobacco inventory service

Serves the record table of the dashboard: filtering, sorting and pagination
over the bales fetched from the upstream tobacco management API, together
with the headline statistics, the distinct values used to populate filter
drop-downs and the CSV export of the filtered records."""
