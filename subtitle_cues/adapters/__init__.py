"""Adapters from external transcription payloads to segmenter input."""
