"""Backend integrations for the chronicle event store."""
