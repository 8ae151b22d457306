"""ASGI server glue: request pipeline, error responses, response sending."""
