"""token-splitter: split text and CSV data into token-bounded parts."""

__version__ = "0.1.0"
