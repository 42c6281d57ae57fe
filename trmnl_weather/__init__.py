"""Push Ambient Weather station data to a TRMNL webhook."""
