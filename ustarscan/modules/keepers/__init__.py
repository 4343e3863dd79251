from .carver import read_file, carve_file, carve_file_to_bytes, ReadResult, CarveResult
