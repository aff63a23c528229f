# ABOUTME: Crawl-and-extract pipeline for math competition wiki pages
# ABOUTME: Turns per-problem wiki pages into normalized records and loads them into a document store

__version__ = "0.1.0"
