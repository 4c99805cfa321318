class BMGError(Exception):
    kind = "BMG_ERROR"

class InvalidMagicError(BMGError):
    kind = "INVALID_MAGIC"

class UnsupportedEncodingError(BMGError):
    kind = "UNSUPPORTED_ENCODING"

class UnexpectedEOFError(BMGError):
    kind = "UNEXPECTED_EOF"

class MalformedINFError(BMGError):
    kind = "MALFORMED_INF"

class MalformedDATError(BMGError):
    kind = "MALFORMED_DAT"

class MalformedMIDError(BMGError):
    kind = "MALFORMED_MID"

class MismatchedTablesError(BMGError):
    kind = "MISMATCHED_TABLES"

class MalformedXMLError(BMGError):
    kind = "MALFORMED_XML"
