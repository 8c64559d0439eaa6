"""Domain services for the query pipeline.

Both services are pure: they perform no I/O and share no state, so a
single instance can serve concurrent callers.
"""

from mongo_query.domain.services.option_decoder import OptionDecoder, decode_options
from mongo_query.domain.services.query_compiler import QueryCompiler, compile_query

__all__ = [
    "OptionDecoder",
    "QueryCompiler",
    "compile_query",
    "decode_options",
]
