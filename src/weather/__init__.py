"""
Weather utilities for the landing page.

- aggregate: reduces the 3-hour forecast feed to daily summaries (pure).
- forecast: OpenWeather client (requests). Package with the landing_page Lambda.
"""
