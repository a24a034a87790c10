"""Output layer: command results and their text / JSON rendering."""
