"""HTTP routes for the SwimDesk API."""
