from .peekers import peek_archive, find_entry, PeekResult, ScanResult
