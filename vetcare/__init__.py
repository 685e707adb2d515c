"""VetCare appointment scheduling service."""
