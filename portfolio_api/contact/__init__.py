"""Contact form: shared validation, client, service and API route."""
