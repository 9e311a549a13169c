"""Application layer - the synchronization engine."""
