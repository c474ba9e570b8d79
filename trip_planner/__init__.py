"""Top-level package for the voice-first trip planner.

This package turns spoken or typed travel requests into day-by-day city
itineraries, applies scoped edits to them and answers grounded questions
about the plan.
"""
