SUCCESS = "Success"
VALUE_ERROR = "Value Error"
HEADER_ERROR = "Header Parsing Error"
ENCODING_ERROR = "Unknown Text Encoding Error"
RUNTIME_WARNING = "Runtime Warning"
RECORD_ERROR = "Record Parsing Error"
RESERVED_ERROR = "Reserved Serial Type Error"
OVERFLOW_ERROR = "Overflow Parsing Error"
PAGE_ERROR = "B-Tree Page Parsing Error"
PAGE_TYPE_ERROR = "Unknown Page Type Error"
CELL_POINTER_ERROR = "Cell Pointer Array Error"
CELL_ERROR = "Cell Parsing Error"
DATABASE_ERROR = "Database Parsing Error"

DEFAULT_PAGE_SIZE = 4096
SMALL_PAGE_SIZE = 512
