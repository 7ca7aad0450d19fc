"""State/store layer.

This package owns the authoritative in-memory model of the rover: the
status record, the threat log, and the alert log, plus the escalation
rules and the catalog of events published when any of them change.
"""
