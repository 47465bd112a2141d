"""Raw survey data access for the pavement deterioration engine."""
