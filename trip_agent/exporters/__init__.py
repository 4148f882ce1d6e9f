"""Artifacts produced from a finished itinerary: text, PDF and e-mail."""
