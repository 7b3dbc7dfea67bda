"""Request and response schemas for the SwimDesk API."""
