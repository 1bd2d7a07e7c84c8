"""Runtime host and wiring."""
