"""Command line tools of the block witness extractor."""
