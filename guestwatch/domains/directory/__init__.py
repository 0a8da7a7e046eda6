"""Directory domain: stations, their jurisdictions and the people to notify."""
