"""Game stats feature - reported sessions and the record store."""
