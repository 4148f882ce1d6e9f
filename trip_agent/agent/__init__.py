"""Conversation control, preference handling and itinerary construction."""
