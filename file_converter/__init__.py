"""File conversion service: format registry, router and temp-artifact lifecycle."""
