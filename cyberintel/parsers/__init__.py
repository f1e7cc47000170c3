# Funding news parsers: regex extractor, RSS fetcher, background scheduler.
