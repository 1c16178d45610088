"""HTTP API exposing the inbox snapshot, reply suggestions and reply sending."""
