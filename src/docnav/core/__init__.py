"""Content pipeline: loading, validation, routing, navigation and export."""
