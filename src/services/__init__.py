"""Rate comparison, rebooking and expiry reminder services."""
