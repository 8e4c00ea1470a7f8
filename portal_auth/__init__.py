"""Portal Auth - credential and session layer."""
