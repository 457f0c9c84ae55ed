"""DealFinder - retailer scraping and normalization core."""
