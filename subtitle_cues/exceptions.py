"""Exceptions raised by the subtitle segmenter."""


class ValidationError(ValueError):
    """Raised when word timestamps or a transcription payload are malformed.

    Segmentation never starts on invalid input, so no partial result exists
    when this is raised. Callers should treat it as "the transcription
    produced unusable data".
    """
