"""Acquisition services: fetching, retrying, coordinating and logging scrapes."""
