class AppStatusCode:
    # client errors
    INVALID_INPUT = "200"
    OPERATION_FAILED = "201"
    RECORD_NOT_FOUND = "202"
    DUPLICATE_RECORD = "203"

    # conflicts
    SEQUENCE_CONFLICT = "300"
    BULK_PARTIAL_FAILURE = "301"
