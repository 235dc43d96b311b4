"""Application layer: ports, DTOs, and the collection tree services."""
