"""Static data tables and their effect schemas."""
