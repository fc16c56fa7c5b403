"""June Mapping Extractor."""
