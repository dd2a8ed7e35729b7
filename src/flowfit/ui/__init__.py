"""NiceGUI display surface for the scheduler."""
