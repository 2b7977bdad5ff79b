"""Chart rendering for summary tables (Altair, PNG export via vl-convert)."""
