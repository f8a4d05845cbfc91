"""Meeting records -- persistence model, schemas, repository, and gateway.

MeetingGateway is the entry point for authenticated list/create/delete;
MeetingRepository holds the SQL and the ownership filters.
"""
