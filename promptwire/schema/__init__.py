from .derive import derive_schema, parse_output
from .outputs import StrictOutput, ThinkResult, ThinkStatus

__all__ = ["StrictOutput", "ThinkResult", "ThinkStatus", "derive_schema", "parse_output"]
