"""JSON schemas bundled with gdem."""
