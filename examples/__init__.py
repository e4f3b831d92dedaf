"""Runnable walkthroughs of the pool toolkit."""
