"""
Surf forecast ingestion: merged hourly wave, swell and wind forecasts per spot.
"""

__version__ = "1.0.0"
