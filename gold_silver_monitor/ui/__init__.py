"""Dashboard rendering."""
