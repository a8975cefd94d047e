"""
Benchmark suite for jbind record binding performance.

Compares binding straight into records against decoding with standard JSON
libraries and building the records by hand:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures binding speed and memory usage across different document shapes.
"""
